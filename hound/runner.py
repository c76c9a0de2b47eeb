"""
Subprocess execution for PortHound.

All external tools go through a CommandRunner so the collectors never
touch the OS directly. The real runner suspends until the child exits,
bounds the wait with a timeout, and kills the child (and anything it
spawned) when the wait times out or the calling task is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

import psutil

from hound.errors import CommandLaunchError, CommandTimeout


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one external command."""
    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str = ""

    @property
    def command(self) -> str:
        return self.argv[0] if self.argv else ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe_failure(self) -> str:
        """Short human-readable reason for a non-zero exit."""
        detail = self.stderr.strip() or self.stdout.strip()
        if detail:
            detail = detail.splitlines()[0]
            return f"exit status {self.returncode}: {detail}"
        return f"exit status {self.returncode}"


class CommandRunner:
    """
    Runs an external command and captures its output.

    Subclasses implement run(). Tests substitute a runner that serves
    canned tool output.
    """

    async def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """
        Run a command to completion.

        Args:
            argv: Program followed by its arguments
            timeout: Seconds to wait before killing the command

        Returns:
            CommandResult with decoded output

        Raises:
            CommandLaunchError: If the program could not be started
            CommandTimeout: If the program did not exit in time
        """
        raise NotImplementedError


def decode_output(data: Optional[bytes]) -> str:
    """Decode tool output, replacing invalid bytes."""
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _creation_kwargs() -> dict:
    # Keep console tools from flashing a window when run from a GUI process
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NO_WINDOW}
    return {}


def _kill_descendants(pid: int) -> None:
    """Kill every process spawned by pid, ignoring ones already gone."""
    try:
        children = psutil.Process(pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return

    for child in children:
        try:
            child.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a running child process tree and reap it."""
    if process.returncode is not None:
        return

    _kill_descendants(process.pid)
    try:
        process.kill()
    except ProcessLookupError:
        pass

    await process.wait()


class SubprocessRunner(CommandRunner):
    """
    CommandRunner backed by asyncio subprocesses.

    Output is captured in memory; stdin is closed so a tool that
    prompts cannot hang waiting for input.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize the runner.

        Args:
            timeout: Default time limit applied when run() gets none
        """
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        argv = tuple(argv)
        command = argv[0]
        limit = self._timeout if timeout is None else timeout

        logger.debug("Running %s (timeout %gs)", " ".join(argv), limit)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **_creation_kwargs(),
            )
        except OSError as e:
            raise CommandLaunchError(command, e) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=limit)
        except asyncio.TimeoutError:
            logger.warning("%s did not exit within %gs, killing PID %d", command, limit, process.pid)
            await _terminate(process)
            raise CommandTimeout(command, limit) from None
        except asyncio.CancelledError:
            logger.debug("Cancelled while waiting for %s, killing PID %d", command, process.pid)
            await _terminate(process)
            raise

        result = CommandResult(
            argv=argv,
            returncode=process.returncode,
            stdout=decode_output(stdout),
            stderr=decode_output(stderr),
        )
        logger.debug("%s exited with status %d", command, result.returncode)
        return result
