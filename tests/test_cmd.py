"""
tests/test_cmd.py — Command runner tests.

Uses the current Python interpreter as a stand-in engine so the
real subprocess path is exercised.
"""

import os
import asyncio
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from pulumi_auto.cmd import (
    CommandRunner, CommandResult,
    CommandLaunchError, CommandExecutionError, merge_env,
)


@pytest.fixture
def runner():
    return CommandRunner(sys.executable)


# ─────────────────────────────────────────────
# RUN
# ─────────────────────────────────────────────
class TestRun:
    @pytest.mark.asyncio
    async def test_captures_output(self, runner, tmp_path):
        result = await runner.run(
            ["-c", "import sys; print('out'); print('err', file=sys.stderr)"],
            cwd=tmp_path,
        )
        assert isinstance(result, CommandResult)
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"
        assert result.code == 0

    @pytest.mark.asyncio
    async def test_cwd(self, runner, tmp_path):
        result = await runner.run(["-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert os.path.samefile(result.stdout.strip(), tmp_path)

    @pytest.mark.asyncio
    async def test_env_overlay(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("AMBIENT_VAR", "ambient")
        monkeypatch.setenv("OVERRIDDEN_VAR", "ambient")
        result = await runner.run(
            ["-c", "import os; print(os.environ['AMBIENT_VAR'], os.environ['OVERRIDDEN_VAR'])"],
            cwd=tmp_path,
            env={"OVERRIDDEN_VAR": "overlay"},
        )
        assert result.stdout.strip() == "ambient overlay"

    @pytest.mark.asyncio
    async def test_on_output_streams_lines(self, runner, tmp_path):
        lines = []
        await runner.run(
            ["-c", "print('a'); print('b')"],
            cwd=tmp_path,
            on_output=lines.append,
        )
        assert lines == ["a\n", "b\n"]

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self, runner, tmp_path):
        with pytest.raises(CommandExecutionError) as exc:
            await runner.run(
                ["-c", "import sys; print('partial'); sys.stderr.write('boom'); sys.exit(3)"],
                cwd=tmp_path,
            )
        err = exc.value
        assert err.code == 3
        assert err.stdout == "partial\n"
        assert err.stderr == "boom"
        assert "boom" in str(err)

    @pytest.mark.asyncio
    async def test_long_line_captured(self, runner, tmp_path):
        size = 2 * 1024 * 1024
        lines = []
        result = await runner.run(
            ["-c", f"import sys; sys.stdout.write('x' * {size} + '\\n'); "
                   f"sys.stderr.write('y' * {size})"],
            cwd=tmp_path,
            on_output=lines.append,
        )
        assert result.stdout == "x" * size + "\n"
        assert result.stderr == "y" * size
        assert lines == ["x" * size + "\n"]

    @pytest.mark.asyncio
    async def test_partial_last_line_streamed(self, runner, tmp_path):
        lines = []
        await runner.run(
            ["-c", "import sys; sys.stdout.write('a\\nno-newline')"],
            cwd=tmp_path,
            on_output=lines.append,
        )
        assert lines == ["a\n", "no-newline"]

    @pytest.mark.asyncio
    async def test_failing_callback_kills_process(self, runner, tmp_path, monkeypatch):
        procs = []
        real_exec = asyncio.create_subprocess_exec

        async def tracking_exec(*args, **kwargs):
            proc = await real_exec(*args, **kwargs)
            procs.append(proc)
            return proc

        monkeypatch.setattr(asyncio, "create_subprocess_exec", tracking_exec)

        def on_output(line):
            raise RuntimeError("sink failed")

        with pytest.raises(RuntimeError, match="sink failed"):
            await runner.run(
                ["-c", "import time; print('first', flush=True); time.sleep(60)"],
                cwd=tmp_path,
                on_output=on_output,
            )
        assert len(procs) == 1
        assert procs[0].returncode is not None

    @pytest.mark.asyncio
    async def test_missing_executable_raises(self, tmp_path):
        runner = CommandRunner("definitely-not-a-real-pulumi-binary")
        with pytest.raises(CommandLaunchError, match="definitely-not-a-real"):
            await runner.run(["version"], cwd=tmp_path)


class TestMergeEnv:
    def test_overlay_wins(self, monkeypatch):
        monkeypatch.setenv("X_TEST", "1")
        env = merge_env({"X_TEST": "2"})
        assert env["X_TEST"] == "2"
        assert os.environ["X_TEST"] == "1"

    def test_none(self, monkeypatch):
        monkeypatch.setenv("X_TEST", "1")
        assert merge_env(None)["X_TEST"] == "1"
