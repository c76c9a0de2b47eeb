"""
Error types for PortHound.

Required data sources fail loudly; best-effort sources degrade quietly.
Every fatal error names the external step that failed.
"""

from __future__ import annotations

from typing import Optional


class HoundError(Exception):
    """Base class for all PortHound errors."""


class CommandError(HoundError):
    """An external command could not be run to completion."""

    def __init__(self, command: str, message: str) -> None:
        self.command = command
        super().__init__(message)


class CommandLaunchError(CommandError):
    """The external command could not be started."""

    def __init__(self, command: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(command, f"Failed to run {command}: {cause}")


class CommandTimeout(CommandError):
    """The external command did not exit within its time limit."""

    def __init__(self, command: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(command, f"{command} timed out after {timeout:g}s")


class CollectorUnavailable(HoundError):
    """A required data source (socket or process table) failed."""

    def __init__(self, command: str, cause: str) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Failed to run {command}: {cause}")


class CollectorDegraded(HoundError):
    """
    A best-effort data source failed.

    Raised and absorbed inside the collector; callers only ever see an
    empty, degraded result.
    """


class NotFound(HoundError):
    """The requested port or PID has no current owner."""

    def __init__(self, port: Optional[int] = None, pid: Optional[int] = None) -> None:
        self.port = port
        self.pid = pid
        if port is not None:
            message = f"No process found on port {port}"
        else:
            message = f"No process found with PID {pid}"
        super().__init__(message)


class TerminationFailed(HoundError):
    """The kill command ran but did not report success."""

    def __init__(self, pid: int, port: Optional[int] = None, cause: Optional[str] = None) -> None:
        self.pid = pid
        self.port = port
        self.cause = cause

        message = f"Failed to kill PID {pid}"
        if port is not None:
            message += f" on port {port}"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class NetworkUnavailable(HoundError):
    """No outbound route exists to determine the local address."""


class ConfigError(HoundError):
    """Invalid configuration file or value."""
