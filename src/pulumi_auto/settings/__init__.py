"""pulumi_auto.settings — Project & stack settings files."""

from pulumi_auto.settings.codec import SettingsError, SettingsParseError
from pulumi_auto.settings.project import (
    ProjectSettings, ProjectRuntimeInfo, ProjectBackend, ProjectTemplate,
)
from pulumi_auto.settings.stack import StackSettings
from pulumi_auto.settings.store import (
    SettingsStore, SettingsNotFoundError,
    SETTINGS_EXTENSIONS, normalize_stack_name,
)

__all__ = [
    "SettingsError", "SettingsParseError", "SettingsNotFoundError",
    "ProjectSettings", "ProjectRuntimeInfo", "ProjectBackend", "ProjectTemplate",
    "StackSettings",
    "SettingsStore", "SETTINGS_EXTENSIONS", "normalize_stack_name",
]
