"""
pulumi_auto.workspace.local — Local filesystem workspace.

    ws = LocalWorkspace(work_dir="infra", secrets_provider="passphrase")
    await ws.open()                       # persists initial settings
    await ws.create_stack("dev")          # pulumi stack init dev ...
    settings = await ws.project_settings()

Construction only sets up state. Initial project/stack settings
are written by open(), and every settings or engine operation
raises WorkspaceNotReadyError until open() has completed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Sequence

from pulumi_auto.cmd import CommandResult, CommandRunner, OutputCallback
from pulumi_auto.home import resolve_command
from pulumi_auto.settings import ProjectSettings, SettingsStore, StackSettings
from pulumi_auto.workspace.base import (
    CommandHooks, EngineOutputError, NoopCommandHooks, Program,
    StackSummary, WorkspaceNotReadyError,
)
from pulumi_auto.workspace.config import (
    ConfigMap, ConfigValue, config_flag, parse_config_map,
)


logger = logging.getLogger(__name__)

WORK_DIR_PREFIX = "automation-"


@dataclass
class LocalWorkspaceOptions:
    """LocalWorkspace construction options."""
    work_dir: str | Path | None = None
    pulumi_home: str | None = None
    program: Program | None = None
    env_vars: Mapping[str, str] | None = None
    secrets_provider: str | None = None
    project_settings: ProjectSettings | None = None
    stack_settings: Mapping[str, StackSettings] | None = None


class LocalWorkspace:
    """Workspace backed by a local directory and the engine CLI."""

    def __init__(
        self,
        opts: LocalWorkspaceOptions | None = None,
        *,
        runner: CommandRunner | None = None,
        hooks: CommandHooks | None = None,
        **options: Any,
    ):
        opts = opts or LocalWorkspaceOptions()
        if options:
            opts = replace(opts, **options)
        self._opts = opts

        if opts.work_dir:
            work_dir = Path(opts.work_dir).resolve()
        else:
            work_dir = Path(tempfile.mkdtemp(prefix=WORK_DIR_PREFIX))
        self._work_dir = work_dir
        self._store = SettingsStore(work_dir)

        self._pulumi_home = opts.pulumi_home
        self._program = opts.program
        self._secrets_provider = opts.secrets_provider
        self._env_vars: dict[str, str] = dict(opts.env_vars or {})

        self._runner = runner
        self._hooks: CommandHooks = hooks or NoopCommandHooks()
        self._cmd_lock = asyncio.Lock()
        self._opening: asyncio.Future | None = None
        self._ready = False

    @classmethod
    async def create(
        cls,
        opts: LocalWorkspaceOptions | None = None,
        **kwargs: Any,
    ) -> LocalWorkspace:
        """Construct and open a workspace."""
        ws = cls(opts, **kwargs)
        return await ws.open()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # READINESS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    @property
    def is_ready(self) -> bool:
        return self._ready

    async def open(self) -> LocalWorkspace:
        """Persist initial settings and mark the workspace usable.

        Safe to call more than once; concurrent callers share a single
        initialization. If it fails the error propagates here and the
        workspace stays unopened, so open() can be retried.
        """
        if self._ready:
            return self

        if self._opening is None:
            self._opening = asyncio.ensure_future(self._initialize())
        try:
            await asyncio.shield(self._opening)
        except Exception:
            self._opening = None
            raise

        self._ready = True
        return self

    async def _initialize(self) -> None:
        opts = self._opts
        if opts.project_settings is not None:
            await asyncio.to_thread(self._store.save_project, opts.project_settings)
        # Sequential: qualified names may collapse onto the same file
        for name, settings in (opts.stack_settings or {}).items():
            await asyncio.to_thread(self._store.save_stack, settings, name)
        logger.debug("Workspace %s ready", self._work_dir)

    def _require_ready(self) -> None:
        if not self._ready:
            raise WorkspaceNotReadyError(
                f"Workspace {self._work_dir} is not open. Await open() first."
            )

    async def __aenter__(self) -> LocalWorkspace:
        return await self.open()

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # SETTINGS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    async def project_settings(self) -> ProjectSettings:
        self._require_ready()
        return await asyncio.to_thread(self._store.load_project)

    async def save_project_settings(self, settings: ProjectSettings) -> None:
        self._require_ready()
        await asyncio.to_thread(self._store.save_project, settings)

    async def stack_settings(self, stack_name: str) -> StackSettings:
        self._require_ready()
        return await asyncio.to_thread(self._store.load_stack, stack_name)

    async def save_stack_settings(self, settings: StackSettings, stack_name: str) -> None:
        self._require_ready()
        await asyncio.to_thread(self._store.save_stack, settings, stack_name)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # STACK LIFECYCLE
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    async def create_stack(self, stack_name: str) -> None:
        args = ["stack", "init", stack_name]
        if self._secrets_provider:
            args.extend(["--secrets-provider", self._secrets_provider])
        await self._run_pulumi_cmd("create_stack", args)
        logger.info("Created stack %s", stack_name)

    async def select_stack(self, stack_name: str) -> None:
        await self._run_pulumi_cmd("select_stack", ["stack", "select", stack_name])
        logger.info("Selected stack %s", stack_name)

    async def remove_stack(self, stack_name: str) -> None:
        await self._run_pulumi_cmd("remove_stack", ["stack", "rm", "--yes", stack_name])
        logger.info("Removed stack %s", stack_name)

    async def stack(self) -> str | None:
        """Name of the currently selected stack, or None."""
        for summary in await self.list_stacks():
            if summary.current:
                return summary.name
        return None

    async def list_stacks(self) -> list[StackSummary]:
        result = await self._run_pulumi_cmd("list_stacks", ["stack", "ls", "--json"])
        data = _parse_json("list_stacks", result.stdout)
        if not isinstance(data, list):
            raise EngineOutputError(f"list_stacks: expected a JSON list, got {type(data).__name__}")
        try:
            return [StackSummary.from_json(item) for item in data]
        except ValueError as e:
            raise EngineOutputError(f"list_stacks: {e}") from e

    async def who_am_i(self) -> str:
        result = await self._run_pulumi_cmd("who_am_i", ["whoami"])
        return result.stdout.strip()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # CONFIG
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    async def get_config(self, stack_name: str, key: str) -> ConfigValue:
        result = await self._run_pulumi_cmd(
            "get_config",
            ["config", "get", key, "--json", "--stack", stack_name],
        )
        data = _parse_json("get_config", result.stdout)
        if not isinstance(data, dict):
            raise EngineOutputError(f"get_config: expected a JSON object for '{key}'")
        return ConfigValue.from_json(data)

    async def get_all_config(self, stack_name: str) -> ConfigMap:
        result = await self._run_pulumi_cmd(
            "get_all_config",
            ["config", "--show-secrets", "--json", "--stack", stack_name],
        )
        data = _parse_json("get_all_config", result.stdout)
        try:
            return parse_config_map(data)
        except ValueError as e:
            raise EngineOutputError(f"get_all_config: {e}") from e

    async def set_config(self, stack_name: str, key: str, value: ConfigValue) -> None:
        await self._run_pulumi_cmd(
            "set_config",
            [
                "config", "set", key, config_flag(value),
                "--stack", stack_name, "--non-interactive",
                "--", value.value,
            ],
        )

    async def set_all_config(self, stack_name: str, config: ConfigMap) -> None:
        args = ["config", "set-all", "--stack", stack_name]
        for key, value in config.items():
            args.extend([config_flag(value), f"{key}={value.value}"])
        await self._run_pulumi_cmd("set_all_config", args)

    async def remove_config(self, stack_name: str, key: str) -> None:
        await self._run_pulumi_cmd(
            "remove_config", ["config", "rm", key, "--stack", stack_name],
        )

    async def remove_all_config(self, stack_name: str, keys: Sequence[str]) -> None:
        await self._run_pulumi_cmd(
            "remove_all_config",
            ["config", "rm-all", "--stack", stack_name, *keys],
        )

    async def refresh_config(self, stack_name: str) -> ConfigMap:
        """Pull config from the stack's last deployment, then read it back."""
        await self._run_pulumi_cmd(
            "refresh_config",
            ["config", "refresh", "--force", "--stack", stack_name],
        )
        return await self.get_all_config(stack_name)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # ENV OVERLAY
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def get_env_vars(self) -> dict[str, str]:
        return dict(self._env_vars)

    def set_env_vars(self, env_vars: Mapping[str, str]) -> None:
        self._env_vars.update(env_vars)

    def set_env_var(self, key: str, value: str) -> None:
        self._env_vars[key] = value

    def unset_env_var(self, key: str) -> None:
        self._env_vars.pop(key, None)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # ACCESSORS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    @property
    def work_dir(self) -> Path:
        return self._work_dir

    @property
    def pulumi_home(self) -> str | None:
        return self._pulumi_home

    @property
    def secrets_provider(self) -> str | None:
        return self._secrets_provider

    @property
    def program(self) -> Program | None:
        return self._program

    def get_work_dir(self) -> Path:
        return self._work_dir

    def get_pulumi_home(self) -> str | None:
        return self._pulumi_home

    def get_program(self) -> Program | None:
        return self._program

    def set_program(self, program: Program | None) -> None:
        self._program = program

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # COMMANDS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def serialize_args_for_op(self, op: str) -> list[str]:
        return list(self._hooks.serialize_args_for_op(op))

    def post_command_callback(self, op: str) -> None:
        self._hooks.post_command_callback(op)

    def _get_runner(self) -> CommandRunner:
        if self._runner is None:
            self._runner = CommandRunner(resolve_command())
        return self._runner

    def _command_env(self) -> dict[str, str]:
        env = dict(self._env_vars)
        if self._pulumi_home:
            env["PULUMI_HOME"] = self._pulumi_home
        return env

    async def _run_pulumi_cmd(
        self,
        op: str,
        args: list[str],
        on_output: OutputCallback | None = None,
    ) -> CommandResult:
        self._require_ready()
        argv = _with_extra_args(args, self.serialize_args_for_op(op))
        async with self._cmd_lock:
            result = await self._get_runner().run(
                argv, self._work_dir, self._command_env(), on_output,
            )
        self.post_command_callback(op)
        return result


def _with_extra_args(args: list[str], extra: list[str]) -> list[str]:
    """Append hook args, keeping them ahead of a `--` separator."""
    if not extra:
        return list(args)
    if "--" in args:
        i = args.index("--")
        return [*args[:i], *extra, *args[i:]]
    return [*args, *extra]


def _parse_json(op: str, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise EngineOutputError(f"{op}: engine returned invalid JSON: {e}") from e
