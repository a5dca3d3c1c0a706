"""
pulumi_auto.workspace.base — Workspace contract.

A Workspace is the execution context for stack operations: a
working directory holding Pulumi.yaml / Pulumi.<stack>.yaml, an
environment overlay, and an engine to delegate to.

CommandHooks lets a workspace variant inject extra engine arguments
per operation and react after each command. The local workspace
uses NoopCommandHooks.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol, Sequence, runtime_checkable

from pulumi_auto.settings import ProjectSettings, StackSettings
from pulumi_auto.workspace.config import ConfigMap, ConfigValue


Program = Callable[[], Any]


class WorkspaceError(Exception):
    """Workspace error."""
    pass


class WorkspaceNotReadyError(WorkspaceError):
    """Operation attempted before the workspace was opened."""
    pass


class EngineOutputError(WorkspaceError):
    """Engine output could not be parsed."""
    pass


@dataclass(frozen=True)
class StackSummary:
    """One row of `pulumi stack ls --json`."""
    name: str
    current: bool = False
    last_update: str | None = None
    update_in_progress: bool = False
    resource_count: int | None = None
    url: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> StackSummary:
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError(f"invalid stack summary: {data!r}")
        return cls(
            name=data["name"],
            current=bool(data.get("current", False)),
            last_update=data.get("lastUpdate"),
            update_in_progress=bool(data.get("updateInProgress", False)),
            resource_count=data.get("resourceCount"),
            url=data.get("url"),
        )


@runtime_checkable
class CommandHooks(Protocol):
    """Per-operation customization of delegated commands."""

    def serialize_args_for_op(self, op: str) -> list[str]:
        ...

    def post_command_callback(self, op: str) -> None:
        ...


class NoopCommandHooks:
    """Adds no arguments and ignores command completion."""

    def serialize_args_for_op(self, op: str) -> list[str]:
        return []

    def post_command_callback(self, op: str) -> None:
        return None


class Workspace(Protocol):
    """Operations every workspace provides."""

    async def project_settings(self) -> ProjectSettings: ...
    async def save_project_settings(self, settings: ProjectSettings) -> None: ...
    async def stack_settings(self, stack_name: str) -> StackSettings: ...
    async def save_stack_settings(self, settings: StackSettings, stack_name: str) -> None: ...

    async def create_stack(self, stack_name: str) -> None: ...
    async def select_stack(self, stack_name: str) -> None: ...
    async def remove_stack(self, stack_name: str) -> None: ...

    async def get_config(self, stack_name: str, key: str) -> ConfigValue: ...
    async def get_all_config(self, stack_name: str) -> ConfigMap: ...
    async def set_config(self, stack_name: str, key: str, value: ConfigValue) -> None: ...
    async def set_all_config(self, stack_name: str, config: ConfigMap) -> None: ...
    async def remove_config(self, stack_name: str, key: str) -> None: ...
    async def remove_all_config(self, stack_name: str, keys: Sequence[str]) -> None: ...
    async def refresh_config(self, stack_name: str) -> ConfigMap: ...

    async def who_am_i(self) -> str: ...
    async def stack(self) -> str | None: ...
    async def list_stacks(self) -> list[StackSummary]: ...

    def get_env_vars(self) -> dict[str, str]: ...
    def set_env_vars(self, env_vars: Mapping[str, str]) -> None: ...
    def set_env_var(self, key: str, value: str) -> None: ...
    def unset_env_var(self, key: str) -> None: ...

    def get_work_dir(self) -> Path: ...
    def get_pulumi_home(self) -> str | None: ...
    def get_program(self) -> Program | None: ...
    def set_program(self, program: Program | None) -> None: ...

    def serialize_args_for_op(self, op: str) -> list[str]: ...
    def post_command_callback(self, op: str) -> None: ...
