"""
pulumi_auto.cli — CLI entry point.

Commands:
  pulumi-auto stack init|select|rm|ls|current   — Stack lifecycle
  pulumi-auto config get|set|rm|ls|refresh      — Stack configuration
  pulumi-auto settings show|init                — Settings files
  pulumi-auto whoami                            — Backend identity
  pulumi-auto home show|set                     — Tool configuration
"""

import logging
import sys

import click

from pulumi_auto.cli.stack_cmd import stack_cmd
from pulumi_auto.cli.config_cmd import config_cmd
from pulumi_auto.cli.settings_cmd import settings_cmd
from pulumi_auto.cli.whoami_cmd import whoami_cmd
from pulumi_auto.cli.home_cmd import home_cmd
from pulumi_auto.home import HomeConfigError, load_home_config


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(package_name="pulumi-auto")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Debug logging")
def main(verbose):
    """pulumi-auto — local Pulumi workspace."""
    try:
        level = "DEBUG" if verbose else load_home_config().log_level
    except HomeConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    logging.basicConfig(level=getattr(logging, level, logging.WARNING),
                        format=LOG_FORMAT)


main.add_command(stack_cmd, "stack")
main.add_command(config_cmd, "config")
main.add_command(settings_cmd, "settings")
main.add_command(whoami_cmd, "whoami")
main.add_command(home_cmd, "home")
