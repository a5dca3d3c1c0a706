"""
pulumi_auto — Local workspace for Pulumi projects.

Reads and writes Pulumi.yaml / Pulumi.<stack>.yaml, and drives
stack lifecycle and config through the pulumi CLI.
"""

from pulumi_auto.settings import (
    ProjectSettings,
    ProjectRuntimeInfo,
    ProjectBackend,
    ProjectTemplate,
    StackSettings,
    SettingsStore,
    SettingsError,
    SettingsNotFoundError,
    SettingsParseError,
)
from pulumi_auto.cmd import (
    CommandRunner,
    CommandResult,
    CommandError,
    CommandLaunchError,
    CommandExecutionError,
)
from pulumi_auto.workspace import (
    Workspace,
    LocalWorkspace,
    LocalWorkspaceOptions,
    WorkspaceError,
    WorkspaceNotReadyError,
    EngineOutputError,
    StackSummary,
    CommandHooks,
    NoopCommandHooks,
    ConfigValue,
    ConfigMap,
)

__version__ = "0.1.0"

__all__ = [
    # settings
    "ProjectSettings",
    "ProjectRuntimeInfo",
    "ProjectBackend",
    "ProjectTemplate",
    "StackSettings",
    "SettingsStore",
    "SettingsError",
    "SettingsNotFoundError",
    "SettingsParseError",
    # engine
    "CommandRunner",
    "CommandResult",
    "CommandError",
    "CommandLaunchError",
    "CommandExecutionError",
    # workspace
    "Workspace",
    "LocalWorkspace",
    "LocalWorkspaceOptions",
    "WorkspaceError",
    "WorkspaceNotReadyError",
    "EngineOutputError",
    "StackSummary",
    "CommandHooks",
    "NoopCommandHooks",
    "ConfigValue",
    "ConfigMap",
]
