"""
pulumi_auto.cli.stack_cmd — pulumi-auto stack command.

  pulumi-auto stack init dev --secrets-provider passphrase
  pulumi-auto stack select dev
  pulumi-auto stack rm dev --yes
  pulumi-auto stack ls
  pulumi-auto stack current
"""

import sys

import click

from pulumi_auto.cli.common import dir_option, run


@click.group("stack")
def stack_cmd():
    """Stack lifecycle."""
    pass


@stack_cmd.command("init")
@click.argument("name")
@click.option("--secrets-provider", default=None,
              help="Secrets provider for the new stack")
@dir_option
def stack_init(name, secrets_provider, workspace_dir):
    """Create a new stack."""
    run(workspace_dir, lambda ws: ws.create_stack(name),
        secrets_provider=secrets_provider)
    click.echo(f"✓ Stack '{name}' created.")


@stack_cmd.command("select")
@click.argument("name")
@dir_option
def stack_select(name, workspace_dir):
    """Select the current stack."""
    run(workspace_dir, lambda ws: ws.select_stack(name))
    click.echo(f"✓ Current stack: {name}")


@stack_cmd.command("rm")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@dir_option
def stack_rm(name, yes, workspace_dir):
    """Remove a stack."""
    if not yes:
        if not click.confirm(f"Remove stack '{name}'?"):
            return

    run(workspace_dir, lambda ws: ws.remove_stack(name))
    click.echo(f"✓ Stack '{name}' removed.")


@stack_cmd.command("ls")
@dir_option
def stack_ls(workspace_dir):
    """List stacks."""
    stacks = run(workspace_dir, lambda ws: ws.list_stacks())

    if not stacks:
        click.echo("No stacks. Run 'pulumi-auto stack init <name>'.")
        return

    click.echo(f"{'':2s} {'NAME':24s} {'LAST UPDATE':26s} {'RESOURCES'}")
    click.echo(f"{'':2s} {'─' * 24} {'─' * 26} {'─' * 9}")
    for s in stacks:
        marker = "* " if s.current else "  "
        count = "" if s.resource_count is None else str(s.resource_count)
        click.echo(f"{marker} {s.name:24s} {s.last_update or 'n/a':26s} {count}")


@stack_cmd.command("current")
@dir_option
def stack_current(workspace_dir):
    """Print the current stack name."""
    name = run(workspace_dir, lambda ws: ws.stack())
    if name is None:
        click.echo("No stack selected.", err=True)
        sys.exit(1)
    click.echo(name)
