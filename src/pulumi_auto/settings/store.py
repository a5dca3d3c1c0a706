"""
pulumi_auto.settings.store — Settings file resolution.

File names, rooted at the workspace directory:

    Pulumi.yaml | Pulumi.yml | Pulumi.json                 ← project
    Pulumi.<stack>.yaml | .yml | .json                      ← stack

Extension precedence: .yaml > .yml > .json

Read:  first existing candidate wins.
Write: overwrite the first existing candidate (keeping its format),
       otherwise create with the first extension (.yaml).

Qualified stack names use only their last segment:
    org/project/dev → Pulumi.dev.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, TypeVar

from pulumi_auto.settings import codec
from pulumi_auto.settings.codec import SettingsError, SettingsParseError
from pulumi_auto.settings.project import ProjectSettings
from pulumi_auto.settings.stack import StackSettings


logger = logging.getLogger(__name__)

SETTINGS_BASENAME = "Pulumi"
SETTINGS_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml", ".json")

T = TypeVar("T", ProjectSettings, StackSettings)


class SettingsNotFoundError(SettingsError):
    """No settings file exists for the requested identity."""

    def __init__(self, kind: str, work_dir: str | Path):
        self.kind = kind
        self.work_dir = Path(work_dir)
        super().__init__(
            f"failed to find {kind} settings file in workdir: {self.work_dir}"
        )


def normalize_stack_name(name: str) -> str:
    """Return the on-disk discriminator for a stack name.

    "org/project/dev" → "dev", "dev" → "dev"
    """
    return name.rsplit("/", 1)[-1]


class SettingsStore:
    """Loads and saves project/stack settings in a directory."""

    def __init__(
        self,
        work_dir: str | Path,
        extensions: tuple[str, ...] = SETTINGS_EXTENSIONS,
    ):
        if not extensions:
            raise ValueError("at least one settings extension is required")
        self.work_dir = Path(work_dir)
        self.extensions = tuple(extensions)

    # ─────────────────────────────────────────
    # PATHS
    # ─────────────────────────────────────────
    def _stem(self, stack_name: str | None) -> str:
        if stack_name is None:
            return SETTINGS_BASENAME
        return f"{SETTINGS_BASENAME}.{normalize_stack_name(stack_name)}"

    def _candidates(self, stack_name: str | None) -> list[Path]:
        stem = self._stem(stack_name)
        return [self.work_dir / f"{stem}{ext}" for ext in self.extensions]

    def _find_existing(self, stack_name: str | None) -> Path | None:
        found = [p for p in self._candidates(stack_name) if p.exists()]
        if not found:
            return None
        if len(found) > 1:
            logger.warning(
                "Multiple settings files for %s, using %s (ignored: %s)",
                self._stem(stack_name),
                found[0].name,
                ", ".join(p.name for p in found[1:]),
            )
        return found[0]

    def project_settings_path(self) -> Path | None:
        """Path a project settings read would use, or None."""
        return self._find_existing(None)

    def stack_settings_path(self, stack_name: str) -> Path | None:
        """Path a stack settings read would use, or None."""
        return self._find_existing(stack_name)

    def _write_target(self, stack_name: str | None) -> Path:
        for path in self._candidates(stack_name):
            if path.exists():
                return path
        # New file: first extension in precedence order
        return self._candidates(stack_name)[0]

    # ─────────────────────────────────────────
    # LOAD / SAVE
    # ─────────────────────────────────────────
    def _load(
        self,
        stack_name: str | None,
        from_dict: Callable[[dict], T],
        kind: str,
    ) -> T:
        path = self._find_existing(stack_name)
        if path is None:
            raise SettingsNotFoundError(kind, self.work_dir)

        logger.debug("Reading %s settings from %s", kind, path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise SettingsParseError(path, f"invalid UTF-8: {e}") from e
        data = codec.decode(text, path.suffix, path)
        try:
            return from_dict(data)
        except ValueError as e:
            raise SettingsParseError(path, str(e)) from e

    def _save(self, stack_name: str | None, data: dict, kind: str) -> Path:
        path = self._write_target(stack_name)
        path.write_text(codec.encode(data, path.suffix), encoding="utf-8")
        logger.info("Wrote %s settings to %s", kind, path)
        return path

    def load_project(self) -> ProjectSettings:
        """Read project settings.

        Raises:
            SettingsNotFoundError: No Pulumi.{yaml,yml,json}
            SettingsParseError: File present but malformed
        """
        return self._load(None, ProjectSettings.from_dict, "project")

    def save_project(self, settings: ProjectSettings) -> Path:
        """Write project settings. Returns the written path."""
        return self._save(None, settings.to_dict(), "project")

    def load_stack(self, stack_name: str) -> StackSettings:
        """Read stack settings.

        Raises:
            SettingsNotFoundError: No Pulumi.<stack>.{yaml,yml,json}
            SettingsParseError: File present but malformed
        """
        return self._load(stack_name, StackSettings.from_dict, "stack")

    def save_stack(self, settings: StackSettings, stack_name: str) -> Path:
        """Write stack settings. Returns the written path."""
        return self._save(stack_name, settings.to_dict(), "stack")
