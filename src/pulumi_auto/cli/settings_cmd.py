"""
pulumi_auto.cli.settings_cmd — pulumi-auto settings command.

  pulumi-auto settings show                 — Pulumi.yaml
  pulumi-auto settings show -s dev --json   — Pulumi.dev.yaml as JSON
  pulumi-auto settings init my-app --runtime python
"""

import click

from pulumi_auto.cli.common import dir_option, run, stack_option
from pulumi_auto.settings import ProjectSettings


@click.group("settings")
def settings_cmd():
    """Project & stack settings files."""
    pass


@settings_cmd.command("show")
@stack_option(required=False)
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Print as JSON")
@dir_option
def settings_show(stack_name, as_json, workspace_dir):
    """Print project (or stack) settings."""
    if stack_name:
        doc = run(workspace_dir, lambda ws: ws.stack_settings(stack_name))
    else:
        doc = run(workspace_dir, lambda ws: ws.project_settings())
    click.echo(doc.to_json() if as_json else doc.to_yaml(), nl=False)


@settings_cmd.command("init")
@click.argument("name")
@click.option("--runtime", default="python", help="Project runtime")
@click.option("--description", "-d", default=None, help="Project description")
@dir_option
def settings_init(name, runtime, description, workspace_dir):
    """Write project settings."""
    doc = ProjectSettings(name=name, runtime=runtime, description=description)

    async def _save(ws):
        await ws.save_project_settings(doc)
        return ws.work_dir

    work_dir = run(workspace_dir, _save)
    click.echo(f"✓ Project '{name}' written to {work_dir}")
