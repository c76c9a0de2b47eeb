"""
Raw fact collectors for PortHound.

Each collector runs one Windows enumeration tool and parses its output.
The socket table and process table are required: any failure raises
CollectorUnavailable. The executable path query is best-effort: any
failure yields an empty, degraded ExecutablePaths.

Collectors keep no state between calls and never retry.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from hound.errors import CollectorDegraded, CollectorUnavailable, CommandError
from hound.models import ExecutablePaths, ListeningSocket, ProcessRecord
from hound.parsers import (
    identities_from_records,
    parse_netstat,
    parse_tasklist,
    parse_wmic_paths,
)
from hound.runner import CommandResult, CommandRunner


logger = logging.getLogger(__name__)

NETSTAT_COMMAND = ("netstat", "-ano")
TASKLIST_COMMAND = ("tasklist", "/FO", "CSV", "/NH")
WMIC_PATHS_COMMAND = ("wmic", "process", "get", "ProcessId,ExecutablePath", "/FORMAT:CSV")


async def _run_required(
    runner: CommandRunner,
    argv: Sequence[str],
    timeout: Optional[float],
) -> CommandResult:
    """Run a required tool, converting every failure to CollectorUnavailable."""
    command = argv[0]
    try:
        result = await runner.run(argv, timeout=timeout)
    except CommandError as e:
        raise CollectorUnavailable(command, str(e)) from e

    if not result.ok:
        raise CollectorUnavailable(command, result.describe_failure())
    return result


async def collect_listening_sockets(
    runner: CommandRunner,
    timeout: Optional[float] = None,
) -> dict[int, ListeningSocket]:
    """
    Collect listening sockets keyed by port.

    Args:
        runner: Command runner used to invoke netstat
        timeout: Time limit for netstat (runner default if None)

    Returns:
        Mapping of port to ListeningSocket; first-seen row owns a port

    Raises:
        CollectorUnavailable: If netstat could not be run or failed
    """
    result = await _run_required(runner, NETSTAT_COMMAND, timeout)
    sockets = parse_netstat(result.stdout)
    logger.debug("netstat reported %d listening ports", len(sockets))
    return sockets


async def collect_process_table(
    runner: CommandRunner,
    timeout: Optional[float] = None,
) -> list[ProcessRecord]:
    """
    Collect the process table (name, PID, memory).

    Raises:
        CollectorUnavailable: If tasklist could not be run or failed
    """
    result = await _run_required(runner, TASKLIST_COMMAND, timeout)
    records = parse_tasklist(result.stdout)
    logger.debug("tasklist reported %d processes", len(records))
    return records


async def collect_process_identities(
    runner: CommandRunner,
    timeout: Optional[float] = None,
) -> dict[int, str]:
    """Collect PID -> display name. Same failure contract as the process table."""
    records = await collect_process_table(runner, timeout)
    return identities_from_records(records)


async def _query_executable_paths(
    runner: CommandRunner,
    timeout: Optional[float],
) -> dict[int, str]:
    try:
        result = await runner.run(WMIC_PATHS_COMMAND, timeout=timeout)
    except CommandError as e:
        raise CollectorDegraded(str(e)) from e

    if not result.ok:
        raise CollectorDegraded(f"wmic {result.describe_failure()}")
    return parse_wmic_paths(result.stdout)


async def collect_executable_paths(
    runner: CommandRunner,
    timeout: Optional[float] = None,
) -> ExecutablePaths:
    """
    Collect executable paths keyed by PID.

    Best-effort: a missing tool, insufficient privilege, non-zero exit or
    timeout returns a degraded empty result instead of raising. Processes
    whose path cannot be read are simply absent from the mapping.

    Args:
        runner: Command runner used to invoke wmic
        timeout: Time limit for wmic (runner default if None)

    Returns:
        ExecutablePaths, degraded when the query failed
    """
    try:
        paths = await _query_executable_paths(runner, timeout)
    except CollectorDegraded as e:
        logger.warning("Executable paths unavailable: %s", e)
        return ExecutablePaths.unavailable(str(e))

    logger.debug("wmic reported %d executable paths", len(paths))
    return ExecutablePaths(paths=paths)
