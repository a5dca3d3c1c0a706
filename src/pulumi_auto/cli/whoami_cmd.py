"""
pulumi_auto.cli.whoami_cmd — pulumi-auto whoami command.
"""

import click

from pulumi_auto.cli.common import dir_option, run


@click.command("whoami")
@dir_option
def whoami_cmd(workspace_dir):
    """Print the logged-in backend user."""
    click.echo(run(workspace_dir, lambda ws: ws.who_am_i()))
