"""
PortHound - Listening port and process inspector with kill-by-port.

Correlates the socket table, the process table and executable paths
into one view keyed by process, and terminates processes by port or PID.
"""

__version__ = "1.0.0"
__author__ = "PortHound Contributors"
__license__ = "MIT"

from hound.commands import HoundCommands
from hound.correlation import Correlator, EntryFilter
from hound.errors import (
    CollectorUnavailable,
    HoundError,
    NotFound,
    TerminationFailed,
)
from hound.models import NetworkOverview, PortEntry, ProcessEntry, Protocol
from hound.runner import CommandRunner, SubprocessRunner

__all__ = [
    "HoundCommands",
    "Correlator",
    "EntryFilter",
    "CommandRunner",
    "SubprocessRunner",
    "PortEntry",
    "ProcessEntry",
    "NetworkOverview",
    "Protocol",
    "HoundError",
    "CollectorUnavailable",
    "NotFound",
    "TerminationFailed",
    "__version__",
]
