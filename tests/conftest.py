"""
Pytest configuration and shared fixtures for the PortHound test suite.

Real Windows tools are never run: a FakeRunner serves canned netstat,
tasklist, wmic, taskkill and hostname output instead.
"""

from typing import Optional, Sequence

import pytest

from hound.errors import CommandLaunchError
from hound.runner import CommandResult, CommandRunner


# ============================================================================
# Canned tool output
# ============================================================================

NETSTAT_OUTPUT = """
Active Connections

  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       1024
  TCP    0.0.0.0:8080           0.0.0.0:0              LISTENING       100
  TCP    127.0.0.1:5432         0.0.0.0:0              LISTENING       2400
  TCP    192.168.1.10:52144     140.82.112.4:443       ESTABLISHED     3300
  TCP    [::]:135               [::]:0                 LISTENING       1024
  TCP    [::]:3000              [::]:0                 LISTENING       4100
  UDP    0.0.0.0:5353           *:*                                    3300
  UDP    192.168.1.10:50000     8.8.8.8:53                             3300
"""

TASKLIST_OUTPUT = """\
"System Idle Process","0","Services","0","8 K"
"System","4","Services","0","144 K"
"svchost.exe","1024","Services","0","12,340 K"
"myapp.exe","100","Console","1","50,000 K"
"postgres.exe","2400","Services","0","88,120 K"
"chrome.exe","3300","Console","1","312,456 K"
"node.exe","4100","Console","1","50,000 K"
"""

WMIC_OUTPUT = (
    "\r\r\n"
    "Node,ExecutablePath,ProcessId\r\r\n"
    "DESKTOP,C:\\Windows\\system32\\svchost.exe,1024\r\r\n"
    "DESKTOP,,4\r\r\n"
    "DESKTOP,C:\\Program Files\\PostgreSQL\\16\\bin\\postgres.exe,2400\r\r\n"
    "DESKTOP,C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe,3300\r\r\n"
)


# ============================================================================
# Fake runner
# ============================================================================


class FakeRunner(CommandRunner):
    """
    CommandRunner serving canned responses keyed by program name.

    A response may be a string (stdout, exit 0), a CommandResult, an
    exception to raise, or an async callable taking argv. Programs with
    no response behave as if not installed.
    """

    def __init__(self, **responses) -> None:
        self.responses = responses
        self.calls: list[tuple[str, ...]] = []

    async def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        argv = tuple(argv)
        self.calls.append(argv)
        command = argv[0]

        if command not in self.responses:
            raise CommandLaunchError(command, FileNotFoundError(f"{command} not found"))

        response = self.responses[command]
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, CommandResult):
            return response
        if callable(response):
            return await response(argv)
        return CommandResult(argv=argv, returncode=0, stdout=response)

    def ran(self, command: str) -> bool:
        return any(call[0] == command for call in self.calls)


def failed(command: str, returncode: int = 1, stderr: str = "") -> CommandResult:
    """A CommandResult for a tool that exited with an error."""
    return CommandResult(argv=(command,), returncode=returncode, stdout="", stderr=stderr)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def make_runner():
    """Factory for FakeRunners; responses passed as keyword arguments."""
    return FakeRunner


@pytest.fixture
def host_runner():
    """FakeRunner for a healthy host with all tools available."""
    return FakeRunner(
        netstat=NETSTAT_OUTPUT,
        tasklist=TASKLIST_OUTPUT,
        wmic=WMIC_OUTPUT,
        taskkill="SUCCESS: The process with PID 100 has been terminated.\r\n",
        hostname="DESKTOP-42\r\n",
    )
