"""
Data model for PortHound.

Every value here is request-scoped: it is built from a fresh snapshot
of the host and discarded once the request completes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


UNKNOWN_PROCESS = "Unknown"


class Protocol(Enum):
    """Transport protocol of a listening socket."""
    TCP = "TCP"
    UDP = "UDP"

    @classmethod
    def parse(cls, value: str) -> Optional["Protocol"]:
        """
        Parse a protocol column value.

        Args:
            value: Raw column text, e.g. "TCP" or "udp"

        Returns:
            Matching Protocol or None for anything else (TCPv6, RAW, ...)
        """
        try:
            return cls(value.strip().strip('"').upper())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ListeningSocket:
    """A bound socket waiting for connections or datagrams."""
    port: int
    protocol: Protocol
    owning_pid: int


@dataclass(frozen=True)
class ProcessIdentity:
    """Display name of a running process."""
    pid: int
    display_name: str


@dataclass(frozen=True)
class ProcessRecord:
    """One row of the process table: identity plus memory usage."""
    pid: int
    name: str
    memory_kb: int = 0

    @property
    def identity(self) -> ProcessIdentity:
        return ProcessIdentity(self.pid, self.name)


@dataclass(frozen=True)
class ExecutablePaths:
    """
    Result of the best-effort executable path query.

    A degraded result always carries an empty mapping and the reason
    the query failed.
    """
    paths: dict[int, str] = field(default_factory=dict)
    degraded: bool = False
    reason: Optional[str] = None

    @classmethod
    def unavailable(cls, reason: str) -> "ExecutablePaths":
        return cls(paths={}, degraded=True, reason=reason)

    def get(self, pid: int) -> Optional[str]:
        """Look up a path, returning None instead of an empty string."""
        return self.paths.get(pid) or None

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class PortEntry:
    """A listening port joined with its owning process."""
    port: int
    protocol: Protocol
    pid: int
    process_name: str = UNKNOWN_PROCESS
    executable_path: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.protocol}:{self.port} {self.process_name}({self.pid})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "port": self.port,
            "protocol": self.protocol.value,
            "pid": self.pid,
            "process_name": self.process_name,
            "executable_path": self.executable_path,
        }


@dataclass(frozen=True)
class ProcessEntry:
    """A running process with memory usage and executable path."""
    pid: int
    name: str
    memory_kb: int
    executable_path: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}({self.pid})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "name": self.name,
            "memory_kb": self.memory_kb,
            "executable_path": self.executable_path,
        }


@dataclass(frozen=True)
class NetworkOverview:
    """Outbound-routable local address and host name."""
    local_ip: str
    hostname: str

    def to_dict(self) -> dict[str, Any]:
        return {"local_ip": self.local_ip, "hostname": self.hostname}
