"""
Text parsers for the Windows enumeration tools PortHound reads.

Each parser turns one tool's tabular output into typed values and
silently skips rows it cannot make sense of. Parsers are pure: they
never run commands and never raise on malformed input.

Formats handled:
- netstat -ano               (whitespace table)
- tasklist /FO CSV /NH       (quoted CSV, or the default whitespace table)
- wmic process get ... /FORMAT:CSV
"""

from __future__ import annotations

import csv
import re
from typing import Iterable, Optional

from hound.models import ListeningSocket, ProcessRecord, Protocol


MAX_PORT = 0xFFFF
MAX_PID = 0xFFFFFFFF

# TCP state reported for a listening socket
LISTENING_STATES = {"LISTENING", "LISTEN"}

# Foreign address of an unconnected UDP endpoint
UDP_UNBOUND_PEER = "*:*"

_FIELD_SPLIT = re.compile(r"[\s,]+")

# tasklist default table row: name may contain spaces, memory may carry separators
_TASKLIST_TABLE_ROW = re.compile(
    r"^(?P<name>.+?)\s+(?P<pid>\d+)\s+(?P<session>\S+)\s+(?P<number>\d+)\s+"
    r"(?P<memory>\d[\d.,\s]*?)\s*K?\s*$"
)


def parse_pid(text: str) -> Optional[int]:
    """
    Parse a process identifier column.

    Args:
        text: Raw column text, possibly quoted

    Returns:
        PID as int, or None if not a valid unsigned 32-bit value
    """
    value = text.strip().strip('"').strip()
    if not value.isdigit():
        return None

    pid = int(value)
    if pid > MAX_PID:
        return None
    return pid


def extract_port(address: str) -> Optional[int]:
    """
    Extract the port from a local-address column.

    Handles IPv4 (0.0.0.0:135) and bracketed IPv6 ([::]:135) forms.

    Args:
        address: host:port text

    Returns:
        Port number, or None if missing or out of range
    """
    if ":" not in address:
        return None

    value = address.rsplit(":", 1)[1].strip()
    if not value.isdigit():
        return None

    port = int(value)
    if port > MAX_PORT:
        return None
    return port


def parse_memory(text: str) -> int:
    """
    Parse a memory column such as "12,345 K" into kilobytes.

    Only digits are kept, so any locale's thousands separator works.
    Returns 0 when there are no digits.
    """
    digits = "".join(ch for ch in text if ch.isdigit())
    return int(digits) if digits else 0


def parse_netstat(text: str) -> dict[int, ListeningSocket]:
    """
    Parse netstat -ano output into listening sockets keyed by port.

    TCP rows must be in the LISTENING state. UDP rows carry no state;
    an endpoint with no remote peer (*:*) counts as listening. The first
    row seen for a port owns it; later rows for the same port are dropped.

    Args:
        text: Raw netstat output

    Returns:
        Mapping of port to ListeningSocket, in first-seen order
    """
    sockets: dict[int, ListeningSocket] = {}

    for line in text.splitlines():
        parts = [p.strip('"') for p in _FIELD_SPLIT.split(line.strip()) if p]
        if len(parts) < 4:
            continue

        protocol = Protocol.parse(parts[0])
        if protocol is None:
            continue

        if protocol is Protocol.TCP:
            if len(parts) < 5 or parts[3].upper() not in LISTENING_STATES:
                continue
            pid_text = parts[4]
        else:
            if parts[2] != UDP_UNBOUND_PEER:
                continue
            pid_text = parts[-1]

        port = extract_port(parts[1])
        pid = parse_pid(pid_text)
        if port is None or pid is None:
            continue

        if port not in sockets:
            sockets[port] = ListeningSocket(port=port, protocol=protocol, owning_pid=pid)

    return sockets


def _tasklist_fields(line: str) -> list[str]:
    """Split one tasklist row, CSV or whitespace table."""
    stripped = line.strip()

    if not stripped.startswith('"'):
        match = _TASKLIST_TABLE_ROW.match(stripped)
        if match:
            return [
                match.group("name"),
                match.group("pid"),
                match.group("session"),
                match.group("number"),
                match.group("memory"),
            ]

    try:
        row = next(csv.reader([stripped]))
    except (csv.Error, StopIteration):
        return []
    return [field.strip() for field in row]


def parse_tasklist(text: str) -> list[ProcessRecord]:
    """
    Parse tasklist output into process records.

    Rows with an unparsable PID and the PID 0 placeholder (System Idle
    Process) are skipped. Rows without a memory column get 0 KB.

    Args:
        text: Raw tasklist output

    Returns:
        ProcessRecords in the order tasklist listed them
    """
    records: list[ProcessRecord] = []

    for line in text.splitlines():
        if not line.strip():
            continue

        fields = _tasklist_fields(line)
        if len(fields) < 2:
            continue

        pid = parse_pid(fields[1])
        if not pid:
            continue

        name = fields[0].strip('"').strip()
        if not name:
            continue

        memory_kb = parse_memory(fields[4]) if len(fields) >= 5 else 0
        records.append(ProcessRecord(pid=pid, name=name, memory_kb=memory_kb))

    return records


def identities_from_records(records: Iterable[ProcessRecord]) -> dict[int, str]:
    """Build a pid -> display name mapping; the first row for a pid wins."""
    identities: dict[int, str] = {}
    for record in records:
        identities.setdefault(record.pid, record.name)
    return identities


def parse_wmic_paths(text: str) -> dict[int, str]:
    """
    Parse wmic process CSV output into executable paths keyed by PID.

    Column positions come from the header row when one is present
    (Node,ExecutablePath,ProcessId otherwise). Processes without a path
    are omitted. An unquoted comma inside a path is rejoined when the
    PID is the last column.

    Args:
        text: Raw wmic output

    Returns:
        Mapping of PID to executable path
    """
    paths: dict[int, str] = {}
    path_col, pid_col, width = 1, 2, 3

    lines = [line for line in text.splitlines() if line.strip()]
    for row in csv.reader(lines):
        fields = [field.strip() for field in row]
        lowered = [field.lower() for field in fields]

        if "executablepath" in lowered and "processid" in lowered:
            path_col = lowered.index("executablepath")
            pid_col = lowered.index("processid")
            width = len(fields)
            continue

        if len(fields) <= max(path_col, pid_col):
            continue

        if len(fields) > width and pid_col == width - 1 and path_col < pid_col:
            pid = parse_pid(fields[-1])
            path = ",".join(row[path_col:len(row) - 1]).strip()
        else:
            pid = parse_pid(fields[pid_col])
            path = fields[path_col]

        if pid is None or not path:
            continue

        paths.setdefault(pid, path)

    return paths
