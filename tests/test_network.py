"""
Tests for PortHound network self-description.
"""

import pytest

from conftest import failed
from hound import network
from hound.errors import CommandTimeout, NetworkUnavailable


class FakeSocket:
    """Stand-in for a UDP socket; records the probe address."""

    connected_to = None
    fail_with = None

    def __init__(self, family, kind):
        self.family = family
        self.kind = kind

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def connect(self, address):
        if FakeSocket.fail_with:
            raise FakeSocket.fail_with
        FakeSocket.connected_to = address

    def getsockname(self):
        return ("192.168.1.10", 54321)


@pytest.fixture
def fake_socket(monkeypatch):
    FakeSocket.connected_to = None
    FakeSocket.fail_with = None
    monkeypatch.setattr(network.socket, "socket", FakeSocket)
    return FakeSocket


class TestLocalAddress:
    """Tests for local_address."""

    def test_reads_back_bound_address(self, fake_socket):
        """Test that the bound address is returned."""
        assert network.local_address() == "192.168.1.10"
        assert fake_socket.connected_to == ("8.8.8.8", 80)

    def test_custom_probe(self, fake_socket):
        """Test a custom probe address."""
        network.local_address("1.1.1.1", 53)
        assert fake_socket.connected_to == ("1.1.1.1", 53)

    def test_no_route(self, fake_socket):
        """Test that no route is a network error."""
        fake_socket.fail_with = OSError(101, "Network is unreachable")

        with pytest.raises(NetworkUnavailable, match="unreachable"):
            network.local_address()


class TestHostname:
    """Tests for hostname; it never fails."""

    @pytest.mark.asyncio
    async def test_trims_output(self, host_runner):
        """Test that hostname output is trimmed."""
        assert await network.hostname(host_runner) == "DESKTOP-42"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        failed("hostname"),
        CommandTimeout("hostname", 10.0),
        "   \r\n",
    ])
    async def test_falls_back_to_unknown(self, make_runner, response):
        """Test the unknown hostname fallback."""
        assert await network.hostname(make_runner(hostname=response)) == "unknown"

    @pytest.mark.asyncio
    async def test_missing_command(self, make_runner):
        """Test a missing hostname command."""
        assert await network.hostname(make_runner()) == "unknown"
