"""
Correlation engine for PortHound.

Joins the socket table, the process table and the executable paths on
process identifier into PortEntry and ProcessEntry views. All policy
for missing or conflicting data lives here:

- a socket whose PID has no identity is reported as "Unknown"
- a PID with no known path gets executable_path None
- the earliest netstat row for a port owns it
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Iterable, Mapping, Optional

from hound.collectors import (
    collect_executable_paths,
    collect_listening_sockets,
    collect_process_table,
)
from hound.config import HoundConfig
from hound.models import (
    UNKNOWN_PROCESS,
    ExecutablePaths,
    ListeningSocket,
    PortEntry,
    ProcessEntry,
    ProcessRecord,
)
from hound.parsers import identities_from_records
from hound.runner import CommandRunner
from hound.services import ServiceCategory, get_service_info


logger = logging.getLogger(__name__)

_PROCESS_SORT_KEYS = {
    "memory": lambda e: e.memory_kb,
    "name": lambda e: e.name.lower(),
    "pid": lambda e: e.pid,
}
PROCESS_SORT_FIELDS = tuple(_PROCESS_SORT_KEYS)


def join_ports(
    sockets: Mapping[int, ListeningSocket],
    identities: Mapping[int, str],
    paths: ExecutablePaths,
) -> list[PortEntry]:
    """
    Join listening sockets with process identities and paths.

    Args:
        sockets: Listening sockets keyed by port
        identities: PID to display name
        paths: Executable paths (possibly degraded)

    Returns:
        One PortEntry per port, sorted ascending by port
    """
    entries = [
        PortEntry(
            port=port,
            protocol=sock.protocol,
            pid=sock.owning_pid,
            process_name=identities.get(sock.owning_pid) or UNKNOWN_PROCESS,
            executable_path=paths.get(sock.owning_pid),
        )
        for port, sock in sockets.items()
    ]
    entries.sort(key=lambda e: e.port)
    return entries


def join_processes(
    records: Iterable[ProcessRecord],
    paths: ExecutablePaths,
) -> list[ProcessEntry]:
    """
    Join process table rows with executable paths.

    Returns:
        ProcessEntries sorted by memory, heaviest first; equal memory keeps
        process table order
    """
    entries = [
        ProcessEntry(
            pid=record.pid,
            name=record.name,
            memory_kb=record.memory_kb,
            executable_path=paths.get(record.pid),
        )
        for record in records
    ]
    entries.sort(key=lambda e: e.memory_kb, reverse=True)
    return entries


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """
    Await several collectors concurrently, all or nothing.

    If any of them fails (or the caller is cancelled), the others are
    cancelled and awaited so no subprocess is left running.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class Correlator:
    """
    Builds correlated views from a fresh snapshot on every call.

    Nothing is cached between calls; each view re-runs its collectors.
    """

    def __init__(self, runner: CommandRunner, config: Optional[HoundConfig] = None) -> None:
        """
        Initialize the correlator.

        Args:
            runner: Command runner used by every collector
            config: Timeouts to apply (defaults if None)
        """
        self._runner = runner
        self._config = config or HoundConfig()

    async def build_port_view(self) -> list[PortEntry]:
        """
        Collect and join listening ports with their owning processes.

        Returns:
            PortEntries sorted ascending by port

        Raises:
            CollectorUnavailable: If netstat or tasklist failed; no partial
                list is ever returned
        """
        config = self._config
        sockets, records, paths = await gather_all(
            collect_listening_sockets(self._runner, config.command_timeout),
            collect_process_table(self._runner, config.command_timeout),
            collect_executable_paths(self._runner, config.path_timeout),
        )

        entries = join_ports(sockets, identities_from_records(records), paths)
        logger.info(
            "Correlated %d listening ports (%d processes, %d paths%s)",
            len(entries), len(records), len(paths), ", degraded" if paths.degraded else "",
        )
        return entries

    async def build_process_view(self) -> list[ProcessEntry]:
        """
        Collect and join running processes with their executable paths.

        Returns:
            ProcessEntries sorted descending by memory usage

        Raises:
            CollectorUnavailable: If tasklist failed
        """
        config = self._config
        records, paths = await gather_all(
            collect_process_table(self._runner, config.command_timeout),
            collect_executable_paths(self._runner, config.path_timeout),
        )

        entries = join_processes(records, paths)
        logger.info("Correlated %d processes (%d paths)", len(entries), len(paths))
        return entries


def normalize_path(path: str) -> str:
    """
    Normalize a file path for comparison.

    Args:
        path: File path to normalize

    Returns:
        Normalized lowercase path
    """
    path = os.path.expandvars(os.path.expanduser(path))
    path = os.path.normpath(os.path.abspath(path))
    return path.lower()


@dataclass
class EntryFilter:
    """
    Narrows a port or process view.

    All criteria are optional and combined with AND:
    - search: case-insensitive substring of port, PID, name, path or service
    - category: service category of a port entry
    - path: executable path, or directory containing the executable
    """
    search: Optional[str] = None
    category: Optional[ServiceCategory] = None
    path: Optional[str] = None
    is_directory: bool = False
    normalized_path: Optional[str] = field(init=False, default=None)

    def __post_init__(self) -> None:
        if self.search is not None:
            self.search = self.search.strip().lower() or None
        if self.path:
            self.normalized_path = normalize_path(self.path)

    @property
    def active(self) -> bool:
        return bool(self.search or self.category or self.normalized_path)

    def matches_path(self, exe_path: Optional[str]) -> bool:
        """Check an executable path against the path criterion."""
        if not self.normalized_path:
            return True
        if not exe_path:
            return False

        normalized_exe = normalize_path(exe_path)
        if self.is_directory:
            dir_path = self.normalized_path
            if not dir_path.endswith(os.sep):
                dir_path = dir_path + os.sep
            return normalized_exe.startswith(dir_path)
        return normalized_exe == self.normalized_path

    def _matches_search(self, *values: Any) -> bool:
        if not self.search:
            return True
        return any(self.search in str(value).lower() for value in values if value is not None)

    def matches_port(self, entry: PortEntry) -> bool:
        service = get_service_info(entry.port, entry.process_name)

        if self.category and service.category is not self.category:
            return False
        if not self.matches_path(entry.executable_path):
            return False
        return self._matches_search(
            entry.port, entry.pid, entry.process_name, entry.executable_path, service.name,
        )

    def matches_process(self, entry: ProcessEntry) -> bool:
        # Categories describe ports, not processes
        if not self.matches_path(entry.executable_path):
            return False
        return self._matches_search(entry.pid, entry.name, entry.executable_path)

    def apply_ports(self, entries: Iterable[PortEntry]) -> list[PortEntry]:
        return [entry for entry in entries if self.matches_port(entry)]

    def apply_processes(self, entries: Iterable[ProcessEntry]) -> list[ProcessEntry]:
        return [entry for entry in entries if self.matches_process(entry)]


def sort_processes(
    entries: Iterable[ProcessEntry],
    sort_field: str = "memory",
    descending: bool = True,
) -> list[ProcessEntry]:
    """
    Re-sort a process view.

    Args:
        entries: Process entries
        sort_field: One of "memory", "name", "pid"
        descending: Largest (or Z) first when True

    Returns:
        New sorted list; ties keep their current order

    Raises:
        ValueError: If sort_field is unknown
    """
    key = _PROCESS_SORT_KEYS.get(sort_field)
    if key is None:
        raise ValueError(
            f"Unknown sort field '{sort_field}'. Use one of: {', '.join(PROCESS_SORT_FIELDS)}"
        )
    return sorted(entries, key=key, reverse=descending)
