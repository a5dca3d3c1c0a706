"""
pulumi_auto.cli.config_cmd — pulumi-auto config command.

  pulumi-auto config get aws:region -s dev
  pulumi-auto config set app:password hunter2 --secret -s dev
  pulumi-auto config rm app:password -s dev
  pulumi-auto config ls -s dev
  pulumi-auto config refresh -s dev
"""

import click

from pulumi_auto.cli.common import dir_option, run, stack_option
from pulumi_auto.workspace import ConfigValue


@click.group("config")
def config_cmd():
    """Stack configuration."""
    pass


def _show(config, show_secrets):
    if not config:
        click.echo("No config values.")
        return
    width = max(len(k) for k in config)
    for key in sorted(config):
        value = config[key]
        shown = value.value if show_secrets or not value.secret else "[secret]"
        click.echo(f"{key:{width}s}  {shown}")


@config_cmd.command("get")
@click.argument("key")
@stack_option()
@dir_option
def config_get(key, stack_name, workspace_dir):
    """Print one config value."""
    value = run(workspace_dir, lambda ws: ws.get_config(stack_name, key))
    click.echo(value.value)


@config_cmd.command("set")
@click.argument("key")
@click.argument("value")
@click.option("--secret", is_flag=True, default=False,
              help="Encrypt the value")
@stack_option()
@dir_option
def config_set(key, value, secret, stack_name, workspace_dir):
    """Set one config value."""
    cv = ConfigValue(value=value, secret=secret)
    run(workspace_dir, lambda ws: ws.set_config(stack_name, key, cv))
    click.echo(f"✓ {key} set on '{stack_name}'.")


@config_cmd.command("rm")
@click.argument("keys", nargs=-1, required=True)
@stack_option()
@dir_option
def config_rm(keys, stack_name, workspace_dir):
    """Remove one or more config values."""
    if len(keys) == 1:
        run(workspace_dir, lambda ws: ws.remove_config(stack_name, keys[0]))
    else:
        run(workspace_dir, lambda ws: ws.remove_all_config(stack_name, list(keys)))
    click.echo(f"✓ Removed {', '.join(keys)} from '{stack_name}'.")


@config_cmd.command("ls")
@click.option("--show-secrets", is_flag=True, default=False,
              help="Print secret values in plaintext")
@stack_option()
@dir_option
def config_ls(show_secrets, stack_name, workspace_dir):
    """List config values."""
    config = run(workspace_dir, lambda ws: ws.get_all_config(stack_name))
    _show(config, show_secrets)


@config_cmd.command("refresh")
@stack_option()
@dir_option
def config_refresh(stack_name, workspace_dir):
    """Refresh config from the stack's last deployment."""
    config = run(workspace_dir, lambda ws: ws.refresh_config(stack_name))
    _show(config, False)
