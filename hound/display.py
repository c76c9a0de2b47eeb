"""
Display module for PortHound.

Renders port and process views, the network overview and status
messages on the terminal with rich.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hound.models import NetworkOverview, PortEntry, ProcessEntry, UNKNOWN_PROCESS
from hound.services import Conflict, ServiceCategory, get_service_info


# Color scheme for protocols
PROTOCOL_COLORS = {
    "TCP": "cyan",
    "UDP": "green",
}

# Color scheme for service categories
CATEGORY_COLORS = {
    ServiceCategory.DEV: "bright_blue",
    ServiceCategory.DATABASE: "bright_yellow",
    ServiceCategory.INFRA: "bright_green",
    ServiceCategory.SYSTEM: "dim",
}


def format_memory(memory_kb: int) -> str:
    """Format a kilobyte count, e.g. 524288 -> "512.0 MB"."""
    if memory_kb >= 1024 * 1024:
        return f"{memory_kb / (1024 * 1024):.1f} GB"
    if memory_kb >= 1024:
        return f"{memory_kb / 1024:.1f} MB"
    return f"{memory_kb} KB"


class Display:
    """
    Rich terminal display for PortHound.

    Errors and warnings go to stderr so tables piped elsewhere stay clean.
    """

    def __init__(self, use_color: bool = True, console: Optional[Console] = None) -> None:
        """
        Initialize the display.

        Args:
            use_color: Whether to use colored output
            console: Console to render to (a new one if None)
        """
        self._console = console or Console(color_system="auto" if use_color else None)
        self._err_console = Console(stderr=True, color_system="auto" if use_color else None)

    @property
    def console(self) -> Console:
        """Get the Rich console instance."""
        return self._console

    def format_protocol(self, protocol: str) -> Text:
        """Format protocol with color."""
        return Text(protocol, style=PROTOCOL_COLORS.get(protocol, "white"))

    def format_process(self, name: str) -> Text:
        if name == UNKNOWN_PROCESS:
            return Text(name, style="dim italic")
        return Text(name, style="bright_white")

    def format_path(self, path: Optional[str]) -> Text:
        if not path:
            return Text("-", style="dim")
        return Text(path, style="bright_black")

    def print_ports(self, entries: Sequence[PortEntry], title: str = "Listening Ports") -> None:
        """Print the port view as a table."""
        table = Table(title=f"{title} ({len(entries)})", header_style="bold", title_justify="left")
        table.add_column("Port", justify="right", style="bold")
        table.add_column("Proto", width=5)
        table.add_column("PID", justify="right")
        table.add_column("Process")
        table.add_column("Service")
        table.add_column("Path", overflow="fold")

        for entry in entries:
            service = get_service_info(entry.port, entry.process_name)
            table.add_row(
                str(entry.port),
                self.format_protocol(entry.protocol.value),
                str(entry.pid),
                self.format_process(entry.process_name),
                Text(str(service), style=CATEGORY_COLORS.get(service.category, "white")),
                self.format_path(entry.executable_path),
            )

        self._console.print(table)

    def print_processes(self, entries: Sequence[ProcessEntry], title: str = "Processes") -> None:
        """Print the process view as a table."""
        table = Table(title=f"{title} ({len(entries)})", header_style="bold", title_justify="left")
        table.add_column("PID", justify="right")
        table.add_column("Name", style="bright_white")
        table.add_column("Memory", justify="right")
        table.add_column("Path", overflow="fold")

        for entry in entries:
            table.add_row(
                str(entry.pid),
                Text(entry.name, style="bright_white"),
                format_memory(entry.memory_kb),
                self.format_path(entry.executable_path),
            )

        self._console.print(table)

    def print_conflicts(self, conflicts: Iterable[Conflict]) -> None:
        """Print a warning panel listing port conflicts, if any."""
        lines = [f"[yellow]:{c.port}[/] {escape(c.reason)}" for c in conflicts]
        if not lines:
            return

        panel = Panel(
            "\n".join(lines),
            title="[bold yellow]Possible Port Conflicts[/]",
            border_style="yellow",
        )
        self._console.print(panel)

    def print_overview(self, overview: NetworkOverview) -> None:
        """Print the network overview panel."""
        panel = Panel(
            f"[bold]Local IP:[/] {overview.local_ip}\n[bold]Hostname:[/] {escape(overview.hostname)}",
            title="[bold white]Network[/]",
            border_style="cyan",
        )
        self._console.print(panel)

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; anything but y/yes is no."""
        answer = self._console.input(f"[bold yellow]{question}[/] [dim]\\[y/N][/] ")
        return answer.strip().lower() in ("y", "yes")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self._err_console.print(f"[bold red]Error:[/] {escape(message)}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self._console.print(f"[bold blue]Info:[/] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[bold green]Success:[/] {escape(message)}")
