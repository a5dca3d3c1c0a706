"""
tests/test_workspace.py — LocalWorkspace tests.

Readiness, settings delegation, engine argument vectors,
config/stack output parsing, env overlay, hooks.
"""

import os
import sys
import json
import asyncio
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from pulumi_auto.cmd import CommandResult, CommandExecutionError
from pulumi_auto.settings import (
    ProjectSettings, StackSettings, SettingsNotFoundError,
)
from pulumi_auto.workspace import (
    LocalWorkspace, LocalWorkspaceOptions, WorkspaceNotReadyError,
    EngineOutputError, ConfigValue, StackSummary,
)


class FakeRunner:
    """Records engine calls and replays canned stdout."""

    def __init__(self, outputs=None, fail=None):
        self.calls = []
        self.outputs = outputs or {}
        self.fail = fail or {}

    async def run(self, args, cwd, env=None, on_output=None):
        self.calls.append({"args": list(args), "cwd": cwd, "env": dict(env or {})})
        key = " ".join(args[:2])
        if key in self.fail:
            raise CommandExecutionError(args, 255, "", self.fail[key])
        return CommandResult(stdout=self.outputs.get(key, ""), stderr="", code=0)

    @property
    def last_args(self):
        return self.calls[-1]["args"]


class RecordingHooks:
    def __init__(self, extra=None):
        self.extra = extra or []
        self.seen = []

    def serialize_args_for_op(self, op):
        return list(self.extra)

    def post_command_callback(self, op):
        self.seen.append(op)


PROJECT = ProjectSettings(name="my-project", runtime="python")


async def _open(tmp_path, runner=None, **kw):
    return await LocalWorkspace.create(work_dir=tmp_path, runner=runner or FakeRunner(), **kw)


# ─────────────────────────────────────────────
# CONSTRUCTION & READINESS
# ─────────────────────────────────────────────
class TestReadiness:
    def test_temp_work_dir(self):
        ws = LocalWorkspace()
        assert ws.work_dir.is_dir()
        assert ws.work_dir.name.startswith("automation-")
        assert ws.work_dir.is_absolute()

    def test_options_object(self, tmp_path):
        opts = LocalWorkspaceOptions(work_dir=tmp_path, pulumi_home="/ph", secrets_provider="passphrase")
        ws = LocalWorkspace(opts)
        assert ws.get_work_dir() == tmp_path.resolve()
        assert ws.get_pulumi_home() == "/ph"
        assert ws.secrets_provider == "passphrase"

    def test_unknown_option_rejected(self, tmp_path):
        with pytest.raises(TypeError):
            LocalWorkspace(work_dir=tmp_path, bogus=1)

    def test_construction_writes_nothing(self, tmp_path):
        ws = LocalWorkspace(work_dir=tmp_path, project_settings=PROJECT)
        assert not ws.is_ready
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_operations_require_open(self, tmp_path):
        ws = LocalWorkspace(work_dir=tmp_path, runner=FakeRunner())
        with pytest.raises(WorkspaceNotReadyError):
            await ws.project_settings()
        with pytest.raises(WorkspaceNotReadyError):
            await ws.select_stack("dev")
        with pytest.raises(WorkspaceNotReadyError):
            await ws.save_stack_settings(StackSettings(), "dev")

    @pytest.mark.asyncio
    async def test_open_empty_completes(self, tmp_path):
        ws = await _open(tmp_path)
        assert ws.is_ready
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_open_persists_initial_settings(self, tmp_path):
        dev = StackSettings(config={"aws:region": "us-west-2"})
        prod = StackSettings(secrets_provider="awskms://alias/k")
        ws = await _open(
            tmp_path,
            project_settings=PROJECT,
            stack_settings={"dev": dev, "org/prod": prod},
        )
        assert (tmp_path / "Pulumi.yaml").exists()
        assert (tmp_path / "Pulumi.dev.yaml").exists()
        assert (tmp_path / "Pulumi.prod.yaml").exists()
        assert await ws.project_settings() == PROJECT
        assert await ws.stack_settings("dev") == dev
        assert await ws.stack_settings("prod") == prod

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self, tmp_path):
        ws = LocalWorkspace(work_dir=tmp_path, project_settings=PROJECT)
        first, second = await asyncio.gather(ws.open(), ws.open())
        assert first is second is ws
        assert await ws.open() is ws

    @pytest.mark.asyncio
    async def test_open_failure_surfaces_and_retries(self, tmp_path):
        missing = tmp_path / "not-there"
        ws = LocalWorkspace(work_dir=missing, project_settings=PROJECT)
        with pytest.raises(OSError):
            await ws.open()
        assert not ws.is_ready

        missing.mkdir()
        await ws.open()
        assert (missing / "Pulumi.yaml").exists()

    @pytest.mark.asyncio
    async def test_async_context_manager(self, tmp_path):
        async with LocalWorkspace(work_dir=tmp_path, project_settings=PROJECT) as ws:
            assert ws.is_ready
        assert tmp_path.is_dir()


# ─────────────────────────────────────────────
# SETTINGS
# ─────────────────────────────────────────────
class TestSettings:
    @pytest.mark.asyncio
    async def test_missing_project_settings(self, tmp_path):
        ws = await _open(tmp_path)
        with pytest.raises(SettingsNotFoundError):
            await ws.project_settings()

    @pytest.mark.asyncio
    async def test_json_project_stays_json(self, tmp_path):
        (tmp_path / "Pulumi.json").write_text(json.dumps({"name": "j", "runtime": "go"}))
        ws = await _open(tmp_path)
        assert (await ws.project_settings()).name == "j"

        await ws.save_project_settings(PROJECT)
        assert not (tmp_path / "Pulumi.yaml").exists()
        assert json.loads((tmp_path / "Pulumi.json").read_text())["name"] == "my-project"

    @pytest.mark.asyncio
    async def test_qualified_stack_name(self, tmp_path):
        ws = await _open(tmp_path)
        await ws.save_stack_settings(StackSettings(config={"k:v": "1"}), "teams/dev")
        assert (tmp_path / "Pulumi.dev.yaml").exists()
        assert (await ws.stack_settings("dev")).config == {"k:v": "1"}


# ─────────────────────────────────────────────
# STACK LIFECYCLE
# ─────────────────────────────────────────────
class TestStackCommands:
    @pytest.mark.asyncio
    async def test_create_without_secrets_provider(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner)
        await ws.create_stack("dev")
        assert runner.last_args == ["stack", "init", "dev"]

    @pytest.mark.asyncio
    async def test_create_with_secrets_provider(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner, secrets_provider="passphrase")
        await ws.create_stack("dev")
        assert runner.last_args == ["stack", "init", "dev", "--secrets-provider", "passphrase"]

    @pytest.mark.asyncio
    async def test_select(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner, secrets_provider="passphrase")
        await ws.select_stack("org/proj/dev")
        assert runner.last_args == ["stack", "select", "org/proj/dev"]

    @pytest.mark.asyncio
    async def test_remove(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner, secrets_provider="passphrase")
        await ws.remove_stack("dev")
        assert runner.last_args == ["stack", "rm", "--yes", "dev"]

    @pytest.mark.asyncio
    async def test_failure_propagates(self, tmp_path):
        runner = FakeRunner(fail={"stack init": "stack 'dev' already exists"})
        ws = await _open(tmp_path, runner)
        with pytest.raises(CommandExecutionError, match="already exists") as exc:
            await ws.create_stack("dev")
        assert exc.value.code == 255
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_cwd_and_env(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner, pulumi_home="/opt/pulumi", env_vars={"A": "1"})
        await ws.select_stack("dev")
        call = runner.calls[-1]
        assert call["cwd"] == tmp_path.resolve()
        assert call["env"] == {"A": "1", "PULUMI_HOME": "/opt/pulumi"}

    @pytest.mark.asyncio
    async def test_list_stacks(self, tmp_path):
        out = json.dumps([
            {"name": "dev", "current": True, "lastUpdate": "2024-01-01T00:00:00Z",
             "updateInProgress": False, "resourceCount": 4, "url": "https://app/dev"},
            {"name": "prod", "current": False},
        ])
        runner = FakeRunner(outputs={"stack ls": out})
        ws = await _open(tmp_path, runner)

        stacks = await ws.list_stacks()
        assert runner.last_args == ["stack", "ls", "--json"]
        assert [s.name for s in stacks] == ["dev", "prod"]
        assert stacks[0] == StackSummary(
            name="dev", current=True, last_update="2024-01-01T00:00:00Z",
            update_in_progress=False, resource_count=4, url="https://app/dev",
        )
        assert stacks[1].resource_count is None

    @pytest.mark.asyncio
    async def test_current_stack(self, tmp_path):
        out = json.dumps([{"name": "dev"}, {"name": "prod", "current": True}])
        ws = await _open(tmp_path, FakeRunner(outputs={"stack ls": out}))
        assert await ws.stack() == "prod"

    @pytest.mark.asyncio
    async def test_no_current_stack(self, tmp_path):
        ws = await _open(tmp_path, FakeRunner(outputs={"stack ls": "[]"}))
        assert await ws.stack() is None

    @pytest.mark.asyncio
    async def test_list_stacks_bad_output(self, tmp_path):
        ws = await _open(tmp_path, FakeRunner(outputs={"stack ls": "not json"}))
        with pytest.raises(EngineOutputError):
            await ws.list_stacks()

    @pytest.mark.asyncio
    async def test_who_am_i(self, tmp_path):
        runner = FakeRunner(outputs={"whoami": "alice\n"})
        ws = await _open(tmp_path, runner)
        assert await ws.who_am_i() == "alice"
        assert runner.last_args == ["whoami"]


# ─────────────────────────────────────────────
# CONFIG
# ─────────────────────────────────────────────
class TestConfig:
    @pytest.mark.asyncio
    async def test_get_config(self, tmp_path):
        runner = FakeRunner(outputs={"config get": '{"value": "us-west-2", "secret": false}'})
        ws = await _open(tmp_path, runner)
        assert await ws.get_config("dev", "aws:region") == ConfigValue("us-west-2", False)
        assert runner.last_args == ["config", "get", "aws:region", "--json", "--stack", "dev"]

    @pytest.mark.asyncio
    async def test_get_all_config(self, tmp_path):
        out = json.dumps({
            "aws:region": {"value": "us-west-2", "secret": False},
            "app:password": {"value": "hunter2", "secret": True},
        })
        runner = FakeRunner(outputs={"config --show-secrets": out})
        ws = await _open(tmp_path, runner)
        config = await ws.get_all_config("dev")
        assert runner.last_args == ["config", "--show-secrets", "--json", "--stack", "dev"]
        assert config == {
            "aws:region": ConfigValue("us-west-2", False),
            "app:password": ConfigValue("hunter2", True),
        }

    @pytest.mark.asyncio
    async def test_set_config(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner)
        await ws.set_config("dev", "app:password", ConfigValue("-starts-with-dash", secret=True))
        assert runner.last_args == [
            "config", "set", "app:password", "--secret",
            "--stack", "dev", "--non-interactive", "--", "-starts-with-dash",
        ]

    @pytest.mark.asyncio
    async def test_set_all_config(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner)
        await ws.set_all_config("dev", {
            "aws:region": ConfigValue("us-west-2"),
            "app:password": ConfigValue("s3cret", secret=True),
        })
        assert runner.last_args == [
            "config", "set-all", "--stack", "dev",
            "--plaintext", "aws:region=us-west-2",
            "--secret", "app:password=s3cret",
        ]

    @pytest.mark.asyncio
    async def test_remove_config(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner)
        await ws.remove_config("dev", "aws:region")
        assert runner.last_args == ["config", "rm", "aws:region", "--stack", "dev"]
        await ws.remove_all_config("dev", ["a:b", "c:d"])
        assert runner.last_args == ["config", "rm-all", "--stack", "dev", "a:b", "c:d"]

    @pytest.mark.asyncio
    async def test_refresh_config(self, tmp_path):
        out = json.dumps({"aws:region": {"value": "eu-west-1", "secret": False}})
        runner = FakeRunner(outputs={"config --show-secrets": out})
        ws = await _open(tmp_path, runner)
        config = await ws.refresh_config("dev")
        assert runner.calls[0]["args"] == ["config", "refresh", "--force", "--stack", "dev"]
        assert config == {"aws:region": ConfigValue("eu-west-1")}

    @pytest.mark.asyncio
    async def test_config_never_touches_settings_files(self, tmp_path):
        ws = await _open(tmp_path)
        await ws.set_config("dev", "k:v", ConfigValue("1"))
        assert list(tmp_path.iterdir()) == []


# ─────────────────────────────────────────────
# ENV OVERLAY
# ─────────────────────────────────────────────
class TestEnvVars:
    def test_mutations_visible(self, tmp_path):
        ws = LocalWorkspace(work_dir=tmp_path, env_vars={"A": "1"})
        ws.set_env_var("B", "2")
        ws.set_env_vars({"A": "10", "C": "3"})
        ws.unset_env_var("B")
        ws.unset_env_var("NOT_SET")
        assert ws.get_env_vars() == {"A": "10", "C": "3"}

    def test_get_returns_copy(self, tmp_path):
        ws = LocalWorkspace(work_dir=tmp_path)
        ws.get_env_vars()["X"] = "1"
        assert ws.get_env_vars() == {}

    def test_ambient_env_untouched(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AMBIENT_ONLY", "keep")
        ws = LocalWorkspace(work_dir=tmp_path, env_vars={"AMBIENT_ONLY": "x"})
        ws.unset_env_var("AMBIENT_ONLY")
        assert os.environ["AMBIENT_ONLY"] == "keep"

    @pytest.mark.asyncio
    async def test_next_command_sees_overlay(self, tmp_path):
        runner = FakeRunner()
        ws = await _open(tmp_path, runner, project_settings=PROJECT)
        ws.set_env_var("PULUMI_CONFIG_PASSPHRASE", "pw")
        await ws.select_stack("dev")
        assert runner.calls[-1]["env"]["PULUMI_CONFIG_PASSPHRASE"] == "pw"
        assert "PULUMI_CONFIG_PASSPHRASE" not in (tmp_path / "Pulumi.yaml").read_text()


# ─────────────────────────────────────────────
# PROGRAM & HOOKS
# ─────────────────────────────────────────────
class TestHooks:
    def test_program_accessors(self, tmp_path):
        def prog():
            return None

        ws = LocalWorkspace(work_dir=tmp_path, program=prog)
        assert ws.get_program() is prog
        ws.set_program(None)
        assert ws.get_program() is None

    def test_default_hooks_are_noop(self, tmp_path):
        ws = LocalWorkspace(work_dir=tmp_path)
        assert ws.serialize_args_for_op("create_stack") == []
        assert ws.post_command_callback("create_stack") is None

    @pytest.mark.asyncio
    async def test_hook_args_and_callback(self, tmp_path):
        runner = FakeRunner()
        hooks = RecordingHooks(extra=["--remote"])
        ws = await _open(tmp_path, runner, hooks=hooks)

        await ws.select_stack("dev")
        assert runner.last_args == ["stack", "select", "dev", "--remote"]

        await ws.set_config("dev", "k:v", ConfigValue("x"))
        assert runner.last_args[-3:] == ["--remote", "--", "x"]
        assert hooks.seen == ["select_stack", "set_config"]

    @pytest.mark.asyncio
    async def test_callback_skipped_on_failure(self, tmp_path):
        hooks = RecordingHooks()
        ws = await _open(tmp_path, FakeRunner(fail={"stack rm": "nope"}), hooks=hooks)
        with pytest.raises(CommandExecutionError):
            await ws.remove_stack("dev")
        assert hooks.seen == []
