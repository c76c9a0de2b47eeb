"""
Command-line interface for PortHound.

Parses command-line arguments, runs the requested operation through the
command boundary and renders the result.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

from hound import __version__
from hound.commands import HoundCommands
from hound.config import load_config
from hound.correlation import PROCESS_SORT_FIELDS, EntryFilter, sort_processes
from hound.display import Display
from hound.errors import HoundError, NotFound
from hound.export import EntryKind, Exporter, ExportFormat
from hound.services import ServiceCategory, detect_conflicts


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2
EXIT_INTERRUPTED = 130

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="porthound",
        description="Inspect listening ports and processes, and kill them by port or PID.",
        epilog="Killing processes owned by other users requires Administrator privileges.",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="TOML configuration file"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Time limit for each external tool (default: 10, 20 for wmic)"
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # ports
    ports = subparsers.add_parser("ports", help="List listening ports and their processes")
    _add_filter_options(ports)
    ports.add_argument(
        "-c", "--category",
        choices=[c.value for c in ServiceCategory],
        help="Only show ports of this service category"
    )
    ports.add_argument(
        "--no-conflicts",
        action="store_true",
        help="Don't report well-known ports held by unexpected services"
    )
    _add_output_options(ports)
    ports.set_defaults(handler=run_ports)

    # processes
    processes = subparsers.add_parser("processes", help="List running processes")
    _add_filter_options(processes)
    processes.add_argument(
        "--sort",
        choices=PROCESS_SORT_FIELDS,
        default="memory",
        help="Sort field (default: memory)"
    )
    processes.add_argument(
        "--ascending",
        action="store_true",
        help="Sort smallest first"
    )
    processes.add_argument(
        "-n", "--limit",
        type=int,
        metavar="N",
        help="Show at most N processes"
    )
    _add_output_options(processes)
    processes.set_defaults(handler=run_processes)

    # kill-port
    kill_port = subparsers.add_parser("kill-port", help="Force-kill the process listening on a port")
    kill_port.add_argument("port", type=int, help="Port number")
    kill_port.add_argument("-y", "--yes", action="store_true", help="Don't ask for confirmation")
    kill_port.set_defaults(handler=run_kill_port)

    # kill-pid
    kill_pid = subparsers.add_parser("kill-pid", help="Force-kill a process by PID")
    kill_pid.add_argument("pid", type=int, help="Process ID")
    kill_pid.add_argument("-y", "--yes", action="store_true", help="Don't ask for confirmation")
    kill_pid.set_defaults(handler=run_kill_pid)

    # overview
    overview = subparsers.add_parser("overview", help="Show local IP address and hostname")
    overview.add_argument("--json", action="store_true", help="Print JSON instead of a panel")
    overview.set_defaults(handler=run_overview)

    return parser


def _add_filter_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s", "--search",
        metavar="TEXT",
        help="Only show entries whose port, PID, name or path contains TEXT"
    )
    parser.add_argument(
        "-f", "--filter",
        dest="filter_path",
        metavar="PATH",
        help="Filter by executable path or directory"
    )


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table"
    )
    parser.add_argument(
        "--export",
        dest="export_file",
        metavar="FILE",
        help="Export the listed entries to file (JSON or CSV)"
    )
    parser.add_argument(
        "--export-format",
        choices=["json", "csv"],
        metavar="FMT",
        help="Force export format (auto-detected from extension by default)"
    )


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; WARNING and up unless verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_filter(args: argparse.Namespace) -> EntryFilter:
    """Build an EntryFilter from ports/processes arguments."""
    is_dir = False
    if args.filter_path:
        is_dir = (
            os.path.isdir(args.filter_path)
            or args.filter_path.endswith(os.sep)
            or args.filter_path.endswith("/")
        )

    category = getattr(args, "category", None)
    return EntryFilter(
        search=args.search,
        category=ServiceCategory(category) if category else None,
        path=args.filter_path,
        is_directory=is_dir,
    )


def export_entries(args: argparse.Namespace, kind: EntryKind, entries: Sequence, display: Display) -> None:
    if not args.export_file:
        return

    export_format = ExportFormat(args.export_format) if args.export_format else None
    with Exporter(args.export_file, kind, export_format) as exporter:
        exporter.write_entries(entries)

    display.print_info(f"Exported {exporter.entry_count} entries to: {args.export_file}")


async def run_ports(args: argparse.Namespace, commands: HoundCommands, display: Display) -> int:
    entries = build_filter(args).apply_ports(await commands.scan_ports())

    if args.json:
        display.console.print_json(data=[entry.to_dict() for entry in entries])
    else:
        display.print_ports(entries)
        if not args.no_conflicts:
            display.print_conflicts(detect_conflicts(entries))

    export_entries(args, EntryKind.PORTS, entries, display)
    return EXIT_OK


async def run_processes(args: argparse.Namespace, commands: HoundCommands, display: Display) -> int:
    entries = build_filter(args).apply_processes(await commands.list_processes())
    entries = sort_processes(entries, args.sort, descending=not args.ascending)
    if args.limit is not None:
        entries = entries[:max(0, args.limit)]

    if args.json:
        display.console.print_json(data=[entry.to_dict() for entry in entries])
    else:
        display.print_processes(entries)

    export_entries(args, EntryKind.PROCESSES, entries, display)
    return EXIT_OK


async def run_kill_port(args: argparse.Namespace, commands: HoundCommands, display: Display) -> int:
    if not args.yes and not display.confirm(f"Force-kill the process listening on port {args.port}?"):
        display.print_info("Aborted.")
        return EXIT_ERROR

    display.print_success(await commands.kill_port(args.port))
    return EXIT_OK


async def run_kill_pid(args: argparse.Namespace, commands: HoundCommands, display: Display) -> int:
    if not args.yes and not display.confirm(f"Force-kill PID {args.pid}?"):
        display.print_info("Aborted.")
        return EXIT_ERROR

    display.print_success(await commands.kill_pid(args.pid))
    return EXIT_OK


async def run_overview(args: argparse.Namespace, commands: HoundCommands, display: Display) -> int:
    overview = await commands.network_overview()

    if args.json:
        display.console.print_json(data=overview.to_dict())
    else:
        display.print_overview(overview)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for PortHound CLI.

    Returns:
        Exit code (0 success, 1 error, 2 port/PID not found)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    display = Display(use_color=not args.no_color)

    try:
        config = load_config(args.config).with_overrides(
            command_timeout=args.timeout,
            path_timeout=args.timeout,
            kill_timeout=args.timeout,
        )
        commands = HoundCommands(config=config)
        return asyncio.run(args.handler(args, commands, display))

    except NotFound as e:
        display.print_error(str(e))
        return EXIT_NOT_FOUND

    except (HoundError, ValueError) as e:
        display.print_error(str(e))
        return EXIT_ERROR

    except OSError as e:
        display.print_error(f"Cannot write export file: {e}")
        return EXIT_ERROR

    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
