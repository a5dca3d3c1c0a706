"""
pulumi_auto.workspace.config — Stack config values.

`pulumi config --json` output:

    {
      "aws:region": {"value": "us-west-2", "secret": false},
      "app:dbPassword": {"value": "hunter2", "secret": true}
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ConfigValue:
    """A single config entry."""
    value: str
    secret: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ConfigValue:
        value = data.get("value")
        return cls(
            value="" if value is None else str(value),
            secret=bool(data.get("secret", False)),
        )


ConfigMap = Dict[str, ConfigValue]


def parse_config_map(data: Any) -> ConfigMap:
    """Parse `pulumi config --json` output."""
    if not isinstance(data, dict):
        raise ValueError(f"expected a config mapping, got {type(data).__name__}")
    return {
        key: ConfigValue.from_json(entry if isinstance(entry, dict) else {"value": entry})
        for key, entry in data.items()
    }


def config_flag(value: ConfigValue) -> str:
    return "--secret" if value.secret else "--plaintext"
