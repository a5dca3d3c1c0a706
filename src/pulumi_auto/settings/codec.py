"""
pulumi_auto.settings.codec — Settings document (de)serialization.

Two textual shapes are supported:

    .yaml / .yml   → PyYAML (safe_load / safe_dump)
    .json          → json, pretty-printed with 4-space indentation

No file I/O happens here. The store reads the text and passes the
path along only so errors can name the offending file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml


JSON_EXTENSIONS = (".json",)
JSON_INDENT = 4


class SettingsError(Exception):
    """Base class for settings errors."""
    pass


class SettingsParseError(SettingsError):
    """Settings file present but malformed."""

    def __init__(self, path: str | Path | None, message: str):
        self.path = Path(path) if path is not None else None
        self.message = message
        where = str(self.path) if self.path is not None else "<settings>"
        super().__init__(f"{where}: {message}")


def is_json(ext: str) -> bool:
    return ext.lower() in JSON_EXTENSIONS


def decode(text: str, ext: str, path: str | Path | None = None) -> dict[str, Any]:
    """Parse settings text into a mapping.

    Args:
        text: File contents
        ext: File extension (".yaml", ".yml", ".json")
        path: Source path, used only in error messages

    Raises:
        SettingsParseError: Malformed content or non-mapping top level
    """
    if is_json(ext):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SettingsParseError(path, f"invalid JSON: {e}") from e
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SettingsParseError(path, f"invalid YAML: {e}") from e
        # Empty YAML file
        if data is None:
            data = {}

    if not isinstance(data, dict):
        raise SettingsParseError(
            path, f"settings must be a mapping, got {type(data).__name__}"
        )
    return data


def encode(data: dict[str, Any], ext: str) -> str:
    """Serialize a settings mapping for the given extension."""
    if is_json(ext):
        return json.dumps(data, indent=JSON_INDENT) + "\n"
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
