"""
pulumi_auto.cli.common — Helpers shared by CLI commands.

Commands build a LocalWorkspace over the target directory, open it,
and run one async operation. Library errors are reported as
"Error: ..." on stderr; engine failures exit with the engine's code.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import click

from pulumi_auto.cmd import CommandError, CommandExecutionError, CommandRunner
from pulumi_auto.home import HomeConfigError, load_home_config, resolve_command
from pulumi_auto.settings import SettingsError
from pulumi_auto.workspace import LocalWorkspace, WorkspaceError


logger = logging.getLogger(__name__)

T = TypeVar("T")

dir_option = click.option(
    "-C", "--dir", "workspace_dir", default=None,
    help="Workspace directory (default: pwd)",
)


def stack_option(required: bool = True):
    return click.option(
        "-s", "--stack", "stack_name", required=required,
        help="Stack name",
    )


async def open_workspace(workspace_dir: str | None, **options: Any) -> LocalWorkspace:
    """Open a LocalWorkspace over workspace_dir (None = cwd)."""
    cfg = load_home_config()
    ws = LocalWorkspace(
        work_dir=Path(workspace_dir or ".").resolve(),
        env_vars=cfg.env,
        runner=CommandRunner(resolve_command(cfg)),
        **options,
    )
    return await ws.open()


def run(
    workspace_dir: str | None,
    action: Callable[[LocalWorkspace], Awaitable[T]],
    **options: Any,
) -> T:
    """Open the workspace, run action on it, and map errors to exits."""

    async def _main() -> T:
        ws = await open_workspace(workspace_dir, **options)
        return await action(ws)

    try:
        return asyncio.run(_main())
    except CommandExecutionError as e:
        if e.stdout:
            click.echo(e.stdout, nl=False)
        if e.stderr:
            click.echo(e.stderr, err=True, nl=False)
        click.echo(f"Error: pulumi exited with code {e.code}", err=True)
        sys.exit(e.code or 1)
    except (CommandError, SettingsError, WorkspaceError, HomeConfigError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
