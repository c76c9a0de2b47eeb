"""
Network self-description for PortHound.

Stateless helpers reporting this machine's outbound address and name.
"""

from __future__ import annotations

import logging
import socket
from typing import Optional

from hound.errors import CommandError, NetworkUnavailable
from hound.runner import CommandRunner


logger = logging.getLogger(__name__)

UNKNOWN_HOSTNAME = "unknown"
HOSTNAME_COMMAND = ("hostname",)


def local_address(probe_host: str = "8.8.8.8", probe_port: int = 80) -> str:
    """
    Find the local address the OS would use for outbound traffic.

    Connecting a UDP socket only selects a route; no packet is sent.

    Args:
        probe_host: Any routable external address
        probe_port: Any port on that address

    Returns:
        Local IP address as a string

    Raises:
        NetworkUnavailable: If no route to the probe exists
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect((probe_host, probe_port))
            return sock.getsockname()[0]
    except OSError as e:
        raise NetworkUnavailable(f"Cannot determine local address: {e}") from e


async def hostname(runner: CommandRunner, timeout: Optional[float] = None) -> str:
    """
    Report this machine's host name.

    Never fails: any problem running the command, or empty output,
    yields "unknown".
    """
    try:
        result = await runner.run(HOSTNAME_COMMAND, timeout=timeout)
    except CommandError as e:
        logger.warning("hostname unavailable: %s", e)
        return UNKNOWN_HOSTNAME

    if not result.ok:
        logger.warning("hostname unavailable: %s", result.describe_failure())
        return UNKNOWN_HOSTNAME

    name = result.stdout.strip()
    return name or UNKNOWN_HOSTNAME
