"""
pulumi_auto.home — Tool config management.

~/.pulumi-auto/config.yaml:

    command: /usr/local/bin/pulumi
    log_level: INFO
    env:
      PULUMI_SKIP_UPDATE_CHECK: "true"

Engine command resolution priority:
  1. PULUMI_AUTO_COMMAND env var
  2. config.yaml `command`
  3. "pulumi"

The config directory itself can be moved with PULUMI_AUTO_HOME.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


DEFAULT_COMMAND = "pulumi"
AUTO_HOME = Path(os.environ.get("PULUMI_AUTO_HOME", "") or Path.home() / ".pulumi-auto")


class HomeConfigError(Exception):
    """Tool config error."""
    pass


@dataclass
class HomeConfig:
    """Global pulumi-auto config."""
    command: str | None = None
    log_level: str = "WARNING"
    env: dict[str, str] = field(default_factory=dict)


def config_path() -> Path:
    return AUTO_HOME / "config.yaml"


def load_home_config() -> HomeConfig:
    """Read ~/.pulumi-auto/config.yaml."""
    cp = config_path()
    if not cp.exists():
        return HomeConfig()

    with open(cp) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise HomeConfigError(f"Invalid config file {cp}: {e}") from e

    if not isinstance(data, dict):
        raise HomeConfigError(f"Config file must be a YAML mapping: {cp}")

    env = data.get("env") or {}
    if not isinstance(env, dict):
        raise HomeConfigError(f"'env' must be a mapping: {cp}")

    return HomeConfig(
        command=data.get("command"),
        log_level=str(data.get("log_level", "WARNING")).upper(),
        env={str(k): str(v) for k, v in env.items()},
    )


def save_home_config(cfg: HomeConfig) -> None:
    """Write ~/.pulumi-auto/config.yaml."""
    AUTO_HOME.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {}
    if cfg.command:
        data["command"] = cfg.command
    if cfg.log_level != "WARNING":
        data["log_level"] = cfg.log_level
    if cfg.env:
        data["env"] = dict(cfg.env)

    with open(config_path(), "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def resolve_command(cfg: HomeConfig | None = None) -> str:
    """Resolve the engine executable.

    Priority: PULUMI_AUTO_COMMAND > config.yaml > "pulumi"
    """
    env_cmd = os.environ.get("PULUMI_AUTO_COMMAND", "").strip()
    if env_cmd:
        return env_cmd

    if cfg is None:
        cfg = load_home_config()
    return cfg.command or DEFAULT_COMMAND
