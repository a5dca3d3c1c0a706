"""
pulumi_auto.cmd — Engine command runner.

Runs the engine executable as a subprocess:

    pulumi stack init dev --secrets-provider passphrase

cwd is the workspace directory, env is the ambient environment with
the workspace overlay on top. stdout is captured and, optionally,
streamed line by line to an `on_output` callback.

No retries and no timeout. If the wait is cancelled or an `on_output`
callback raises, the child process is killed and reaped.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

from pulumi_auto.home import DEFAULT_COMMAND


logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]

READ_CHUNK = 64 * 1024


@dataclass
class CommandResult:
    """Output of a finished engine command."""
    stdout: str
    stderr: str
    code: int


class CommandError(Exception):
    """Base class for engine command errors."""
    pass


class CommandLaunchError(CommandError):
    """Engine executable could not be started."""

    def __init__(self, command: str, message: str):
        self.command = command
        self.message = message
        super().__init__(f"failed to launch '{command}': {message}")


class CommandExecutionError(CommandError):
    """Engine exited with a non-zero code."""

    def __init__(self, args: Sequence[str], code: int, stdout: str, stderr: str):
        self.args_list = list(args)
        self.code = code
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip()
        message = f"'{' '.join(self.args_list)}' exited with code {code}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


def merge_env(overlay: Mapping[str, str] | None) -> dict[str, str]:
    """Ambient environment with overlay values on top."""
    env = dict(os.environ)
    if overlay:
        env.update(overlay)
    return env


async def _drain(
    stream: asyncio.StreamReader | None,
    on_output: OutputCallback | None = None,
) -> str:
    if stream is None:
        return ""
    # Fixed-size reads: lines of any length are captured
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    chunks: list[str] = []
    pending = ""
    while True:
        data = await stream.read(READ_CHUNK)
        text = decoder.decode(data, final=not data)
        chunks.append(text)
        if on_output is not None:
            pending += text
            *lines, pending = pending.split("\n")
            for line in lines:
                on_output(line + "\n")
        if not data:
            break
    if on_output is not None and pending:
        on_output(pending)
    return "".join(chunks)


class CommandRunner:
    """Invokes the engine executable."""

    def __init__(self, command: str = DEFAULT_COMMAND):
        self.command = command

    async def run(
        self,
        args: Sequence[str],
        cwd: str | Path,
        env: Mapping[str, str] | None = None,
        on_output: OutputCallback | None = None,
    ) -> CommandResult:
        """Run the engine and wait for it to exit.

        Args:
            args: Arguments after the executable name
            cwd: Working directory of the process
            env: Overlay merged over os.environ
            on_output: Called with each stdout line as it arrives

        Returns:
            CommandResult (code is always 0)

        Raises:
            CommandLaunchError: Executable missing or not runnable
            CommandExecutionError: Non-zero exit
        """
        argv = [self.command, *args]
        logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd)

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd),
                env=merge_env(env),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise CommandLaunchError(self.command, str(e)) from e

        try:
            stdout, stderr = await asyncio.gather(
                _drain(proc.stdout, on_output),
                _drain(proc.stderr),
            )
            code = await proc.wait()
        except BaseException:
            # Cancellation or a failing on_output callback
            if proc.returncode is None:
                logger.debug("Aborted, killing %s", " ".join(argv))
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
            raise

        if code != 0:
            logger.debug("%s exited with code %d", " ".join(argv), code)
            raise CommandExecutionError(list(args), code, stdout, stderr)

        return CommandResult(stdout=stdout, stderr=stderr, code=code)
