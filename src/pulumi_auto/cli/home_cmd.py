"""
pulumi_auto.cli.home_cmd — pulumi-auto home command.

  pulumi-auto home show
  pulumi-auto home set --command /usr/local/bin/pulumi --log-level INFO
  pulumi-auto home set --env PULUMI_SKIP_UPDATE_CHECK=true
"""

import sys
import click

from pulumi_auto.home import (
    HomeConfigError, config_path, load_home_config, save_home_config,
)


@click.group("home")
def home_cmd():
    """Tool configuration (~/.pulumi-auto/config.yaml)."""
    pass


def _load():
    try:
        return load_home_config()
    except HomeConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@home_cmd.command("show")
def home_show():
    """Print the tool configuration."""
    cfg = _load()
    click.echo(f"Config:     {config_path()}")
    click.echo(f"Command:    {cfg.command or '(default)'}")
    click.echo(f"Log level:  {cfg.log_level}")
    for key in sorted(cfg.env):
        click.echo(f"Env:        {key}={cfg.env[key]}")


@home_cmd.command("set")
@click.option("--command", "command", default=None,
              help="Engine executable")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
                                case_sensitive=False),
              help="Default log level")
@click.option("--env", "env_pairs", multiple=True,
              help="Default env var for engine commands (KEY=VALUE)")
def home_set(command, log_level, env_pairs):
    """Update the tool configuration."""
    cfg = _load()
    if command:
        cfg.command = command
    if log_level:
        cfg.log_level = log_level.upper()
    for pair in env_pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            click.echo(f"Error: --env must be KEY=VALUE, got '{pair}'", err=True)
            sys.exit(1)
        cfg.env[key] = value

    save_home_config(cfg)
    click.echo(f"✓ Saved {config_path()}")
