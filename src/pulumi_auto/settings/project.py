"""
pulumi_auto.settings.project — Project settings document.

Pulumi.yaml format:

    name: my-project
    runtime:
      name: python
      options:
        virtualenv: venv
    description: An example project
    backend:
      url: file://~

`runtime` may also be a plain string (runtime: nodejs).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pulumi_auto.settings import codec


def _check_str(data: dict[str, Any], key: str, prefix: str = "") -> None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"'{prefix}{key}' must be a string")


@dataclass(frozen=True)
class ProjectRuntimeInfo:
    """Runtime with options."""
    name: str
    options: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.options is not None:
            data["options"] = dict(self.options)
        return data


@dataclass(frozen=True)
class ProjectBackend:
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url} if self.url is not None else {}


@dataclass(frozen=True)
class ProjectTemplate:
    """Template metadata used by `pulumi new`."""
    description: str | None = None
    quickstart: str | None = None
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.description is not None:
            data["description"] = self.description
        if self.quickstart is not None:
            data["quickstart"] = self.quickstart
        if self.config:
            data["config"] = dict(self.config)
        return data


@dataclass(frozen=True)
class ProjectSettings:
    """Parsed project settings (Pulumi.yaml).

    Instances are immutable. Use dataclasses.replace() and save
    again to persist a change.
    """
    name: str
    runtime: str | ProjectRuntimeInfo
    main: str | None = None
    description: str | None = None
    author: str | None = None
    website: str | None = None
    license: str | None = None
    config: str | None = None
    template: ProjectTemplate | None = None
    backend: ProjectBackend | None = None

    @property
    def runtime_name(self) -> str:
        if isinstance(self.runtime, ProjectRuntimeInfo):
            return self.runtime.name
        return self.runtime

    # ─────────────────────────────────────────
    # dict
    # ─────────────────────────────────────────
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectSettings:
        """Build from a parsed mapping.

        Raises:
            ValueError: Missing or wrongly typed field
        """
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("project settings require a 'name' string")

        raw_runtime = data.get("runtime")
        runtime: str | ProjectRuntimeInfo
        if isinstance(raw_runtime, str) and raw_runtime:
            runtime = raw_runtime
        elif isinstance(raw_runtime, dict) and isinstance(raw_runtime.get("name"), str):
            options = raw_runtime.get("options")
            if options is not None and not isinstance(options, dict):
                raise ValueError("'runtime.options' must be a mapping")
            runtime = ProjectRuntimeInfo(name=raw_runtime["name"], options=options)
        else:
            raise ValueError("project settings require a 'runtime' string or mapping")

        for key in ("main", "description", "author", "website", "license", "config"):
            _check_str(data, key)

        template = None
        raw_template = data.get("template")
        if raw_template is not None:
            if not isinstance(raw_template, dict):
                raise ValueError("'template' must be a mapping")
            _check_str(raw_template, "description", "template.")
            _check_str(raw_template, "quickstart", "template.")
            template_config = raw_template.get("config") or {}
            if not isinstance(template_config, dict):
                raise ValueError("'template.config' must be a mapping")
            template = ProjectTemplate(
                description=raw_template.get("description"),
                quickstart=raw_template.get("quickstart"),
                config=template_config,
            )

        backend = None
        raw_backend = data.get("backend")
        if raw_backend is not None:
            if not isinstance(raw_backend, dict):
                raise ValueError("'backend' must be a mapping")
            _check_str(raw_backend, "url", "backend.")
            backend = ProjectBackend(url=raw_backend.get("url"))

        return cls(
            name=name,
            runtime=runtime,
            main=data.get("main"),
            description=data.get("description"),
            author=data.get("author"),
            website=data.get("website"),
            license=data.get("license"),
            config=data.get("config"),
            template=template,
            backend=backend,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if isinstance(self.runtime, ProjectRuntimeInfo):
            data["runtime"] = self.runtime.to_dict()
        else:
            data["runtime"] = self.runtime

        for key in ("main", "description", "author", "website", "license", "config"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value

        if self.template is not None:
            data["template"] = self.template.to_dict()
        if self.backend is not None:
            data["backend"] = self.backend.to_dict()
        return data

    # ─────────────────────────────────────────
    # text
    # ─────────────────────────────────────────
    @classmethod
    def from_yaml(cls, text: str) -> ProjectSettings:
        return cls.from_dict(codec.decode(text, ".yaml"))

    @classmethod
    def from_json(cls, text: str) -> ProjectSettings:
        return cls.from_dict(codec.decode(text, ".json"))

    def to_yaml(self) -> str:
        return codec.encode(self.to_dict(), ".yaml")

    def to_json(self) -> str:
        return codec.encode(self.to_dict(), ".json")
