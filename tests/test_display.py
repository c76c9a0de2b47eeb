"""
Tests for PortHound terminal rendering.
"""

from rich.console import Console

from hound.display import Display, format_memory
from hound.models import NetworkOverview, PortEntry, ProcessEntry, Protocol
from hound.services import Conflict


def make_display():
    console = Console(record=True, width=200, color_system=None)
    return Display(use_color=False, console=console), console


def test_format_memory():
    """Test memory formatting."""
    assert format_memory(512) == "512 KB"
    assert format_memory(2048) == "2.0 MB"
    assert format_memory(3 * 1024 * 1024) == "3.0 GB"


def test_print_ports():
    """Test the port table."""
    display, console = make_display()
    display.print_ports([
        PortEntry(5432, Protocol.TCP, 2400, "postgres.exe", "C:\\pg\\postgres.exe"),
        PortEntry(49664, Protocol.TCP, 900, "Unknown", None),
    ])
    text = console.export_text()

    assert "Listening Ports (2)" in text
    assert "postgres.exe" in text
    assert "PostgreSQL database" in text
    assert "Unknown" in text


def test_print_processes():
    """Test the process table."""
    display, console = make_display()
    display.print_processes([ProcessEntry(3300, "chrome.exe", 312456, None)])
    text = console.export_text()

    assert "chrome.exe" in text
    assert "305.1 MB" in text


def test_print_conflicts_empty_prints_nothing():
    """Test that no conflicts prints nothing."""
    display, console = make_display()
    display.print_conflicts([])
    assert console.export_text() == ""


def test_print_conflicts():
    """Test the conflict panel."""
    display, console = make_display()
    display.print_conflicts([Conflict(3306, "node.exe", "Port 3306 is typically MySQL, but occupied by Node.js")])
    assert "typically MySQL" in console.export_text()


def test_print_overview_escapes_markup():
    """Test that the hostname is not read as markup."""
    display, console = make_display()
    display.print_overview(NetworkOverview("10.0.0.7", "[red]host"))
    assert "[red]host" in console.export_text()


def test_print_processes_bracketed_name():
    """Test that a process name with brackets is shown as is."""
    display, console = make_display()
    display.print_processes([
        ProcessEntry(1, "app[beta].exe", 10, None),
        ProcessEntry(2, "x[/y]", 10, None),
    ])
    text = console.export_text()

    assert "app[beta].exe" in text
    assert "x[/y]" in text
