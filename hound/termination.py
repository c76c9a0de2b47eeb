"""
Termination operations for PortHound.

Kills are forceful (taskkill /F) with no graceful phase. A reported
success means the kill request was accepted, not that the process is
verified dead. Resolving a port re-reads the socket table, but the
process can still exit or the port change hands between that read and
the kill.
"""

from __future__ import annotations

import logging
from typing import Optional

from hound.collectors import collect_listening_sockets
from hound.errors import CommandError, NotFound, TerminationFailed
from hound.runner import CommandRunner


logger = logging.getLogger(__name__)


def taskkill_command(pid: int) -> tuple[str, ...]:
    """Build the forceful termination command for a PID."""
    return ("taskkill", "/PID", str(pid), "/F")


async def _force_kill(
    runner: CommandRunner,
    pid: int,
    port: Optional[int] = None,
    timeout: Optional[float] = None,
) -> None:
    logger.info("Requesting forceful termination of PID %d", pid)
    try:
        result = await runner.run(taskkill_command(pid), timeout=timeout)
    except CommandError as e:
        raise TerminationFailed(pid, port=port, cause=str(e)) from e

    if not result.ok:
        raise TerminationFailed(pid, port=port, cause=f"taskkill {result.describe_failure()}")


async def kill_by_port(
    port: int,
    runner: CommandRunner,
    timeout: Optional[float] = None,
    kill_timeout: Optional[float] = None,
) -> str:
    """
    Kill whichever process currently listens on a port.

    Args:
        port: Port to free
        runner: Command runner for netstat and taskkill
        timeout: Time limit for netstat
        kill_timeout: Time limit for taskkill

    Returns:
        Confirmation message

    Raises:
        CollectorUnavailable: If netstat failed
        NotFound: If nothing listens on the port; no kill is attempted
        TerminationFailed: If taskkill did not report success
    """
    sockets = await collect_listening_sockets(runner, timeout)

    sock = sockets.get(port)
    if sock is None:
        raise NotFound(port=port)

    await _force_kill(runner, sock.owning_pid, port=port, timeout=kill_timeout)
    return f"Killed PID {sock.owning_pid} on port {port}"


async def kill_process(
    pid: int,
    runner: CommandRunner,
    timeout: Optional[float] = None,
) -> str:
    """
    Kill a process by PID.

    Raises:
        TerminationFailed: If taskkill did not report success
    """
    await _force_kill(runner, pid, timeout=timeout)
    return f"Killed PID {pid}"
