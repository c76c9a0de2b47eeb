"""
Export module for PortHound.

Writes port and process views to JSON and CSV files for reporting
and offline comparison.
"""

from __future__ import annotations

import csv
import json
import os
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, TextIO, Union

from hound import __version__
from hound.models import PortEntry, ProcessEntry
from hound.services import get_service_info


Entry = Union[PortEntry, ProcessEntry]


class ExportFormat(Enum):
    """Supported export formats."""
    JSON = "json"
    CSV = "csv"


class EntryKind(Enum):
    """Which view is being exported."""
    PORTS = "ports"
    PROCESSES = "processes"


def detect_format(filename: str) -> ExportFormat:
    """
    Detect export format from filename extension.

    Args:
        filename: Output filename

    Returns:
        Detected ExportFormat

    Raises:
        ValueError: If format cannot be determined
    """
    ext = os.path.splitext(filename)[1].lower()

    if ext == ".json":
        return ExportFormat.JSON
    elif ext == ".csv":
        return ExportFormat.CSV
    else:
        raise ValueError(
            f"Cannot determine export format from extension '{ext}'. "
            "Use --export-format to specify json or csv."
        )


class Exporter:
    """
    Exports a port or process view to file.

    CSV rows are written as they arrive; JSON is written as one document
    on close().
    """

    CSV_HEADERS = {
        EntryKind.PORTS: [
            "port",
            "protocol",
            "pid",
            "process_name",
            "executable_path",
            "service",
            "category",
        ],
        EntryKind.PROCESSES: [
            "pid",
            "name",
            "memory_kb",
            "executable_path",
        ],
    }

    def __init__(
        self,
        filename: str,
        kind: EntryKind,
        format: Optional[ExportFormat] = None,
    ) -> None:
        """
        Initialize the exporter.

        Args:
            filename: Output file path
            kind: Whether ports or processes are exported
            format: Export format (auto-detected if None)
        """
        self._filename = filename
        self._kind = kind
        self._format = format or detect_format(filename)

        self._file: Optional[TextIO] = None
        self._csv_writer: Optional[csv.DictWriter] = None
        self._json_entries: list[dict] = []
        self._entry_count = 0

        self._open_file()

    def _open_file(self) -> None:
        """Open the output file and initialize writer."""
        self._file = open(self._filename, "w", newline="", encoding="utf-8")

        if self._format == ExportFormat.CSV:
            self._csv_writer = csv.DictWriter(
                self._file,
                fieldnames=self.CSV_HEADERS[self._kind],
                extrasaction="ignore"
            )
            self._csv_writer.writeheader()

    def _entry_to_dict(self, entry: Entry) -> dict:
        data = entry.to_dict()

        if isinstance(entry, PortEntry):
            service = get_service_info(entry.port, entry.process_name)
            data["service"] = service.name
            data["category"] = service.category.value

        return data

    def write_entry(self, entry: Entry) -> None:
        """Write a single entry."""
        data = self._entry_to_dict(entry)
        self._entry_count += 1

        if self._format == ExportFormat.CSV:
            if self._csv_writer:
                self._csv_writer.writerow(data)
        else:
            self._json_entries.append(data)

    def write_entries(self, entries: Iterable[Entry]) -> None:
        for entry in entries:
            self.write_entry(entry)

    def close(self) -> None:
        """Close the export file and finalize output."""
        if self._format == ExportFormat.JSON and self._file:
            export_data = {
                "export_info": {
                    "tool": "PortHound",
                    "version": __version__,
                    "export_time": datetime.now().isoformat(),
                    "kind": self._kind.value,
                    "entry_count": self._entry_count,
                },
                self._kind.value: self._json_entries,
            }
            json.dump(export_data, self._file, indent=2)

        if self._file:
            self._file.close()
            self._file = None

    @property
    def entry_count(self) -> int:
        """Get the number of entries exported."""
        return self._entry_count

    @property
    def filename(self) -> str:
        return self._filename

    def __enter__(self) -> "Exporter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
