"""pulumi_auto.workspace — Workspace contract & local implementation."""

from pulumi_auto.workspace.base import (
    Workspace, WorkspaceError, WorkspaceNotReadyError, EngineOutputError,
    StackSummary, CommandHooks, NoopCommandHooks, Program,
)
from pulumi_auto.workspace.config import ConfigValue, ConfigMap
from pulumi_auto.workspace.local import LocalWorkspace, LocalWorkspaceOptions

__all__ = [
    "Workspace", "WorkspaceError", "WorkspaceNotReadyError", "EngineOutputError",
    "StackSummary", "CommandHooks", "NoopCommandHooks", "Program",
    "ConfigValue", "ConfigMap",
    "LocalWorkspace", "LocalWorkspaceOptions",
]
