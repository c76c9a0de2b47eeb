"""
Command boundary for PortHound.

The five operations a UI shell calls. Each call takes a fresh snapshot;
calls share no mutable state and may run concurrently.
"""

from __future__ import annotations

from typing import Optional

from hound.config import HoundConfig
from hound.correlation import Correlator
from hound.models import NetworkOverview, PortEntry, ProcessEntry
from hound.network import hostname, local_address
from hound.parsers import MAX_PID, MAX_PORT
from hound.runner import CommandRunner, SubprocessRunner
from hound.termination import kill_by_port, kill_process


def _check_port(port: int) -> int:
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= MAX_PORT:
        raise ValueError(f"Port must be between 0 and {MAX_PORT}, got {port!r}")
    return port


def _check_pid(pid: int) -> int:
    if isinstance(pid, bool) or not isinstance(pid, int) or not 0 <= pid <= MAX_PID:
        raise ValueError(f"PID must be between 0 and {MAX_PID}, got {pid!r}")
    return pid


class HoundCommands:
    """
    Request/response surface over the correlation engine.

    Errors propagate as HoundError subclasses; argument errors as ValueError.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        config: Optional[HoundConfig] = None,
    ) -> None:
        self._config = config or HoundConfig()
        self._runner = runner or SubprocessRunner(timeout=self._config.command_timeout)

    @property
    def config(self) -> HoundConfig:
        return self._config

    async def scan_ports(self) -> list[PortEntry]:
        """All listening ports with their owning processes, by port."""
        return await Correlator(self._runner, self._config).build_port_view()

    async def kill_port(self, port: int) -> str:
        """Force-kill the process listening on a port."""
        _check_port(port)
        return await kill_by_port(
            port,
            self._runner,
            timeout=self._config.command_timeout,
            kill_timeout=self._config.kill_timeout,
        )

    async def network_overview(self) -> NetworkOverview:
        """Local outbound address and host name."""
        local_ip = local_address(self._config.probe_host, self._config.probe_port)
        name = await hostname(self._runner, timeout=self._config.command_timeout)
        return NetworkOverview(local_ip=local_ip, hostname=name)

    async def list_processes(self) -> list[ProcessEntry]:
        """All running processes, heaviest memory first."""
        return await Correlator(self._runner, self._config).build_process_view()

    async def kill_pid(self, pid: int) -> str:
        """Force-kill a process by PID."""
        _check_pid(pid)
        return await kill_process(pid, self._runner, timeout=self._config.kill_timeout)
