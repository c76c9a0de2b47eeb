"""
Port intelligence module for PortHound.

Explains what is probably listening on a port by combining:
- A database of well-known service ports
- Hints derived from the owning process name
- Port range heuristics for development servers
- Conflict detection when a well-known port is held by another service
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Protocol


class ServiceCategory(Enum):
    """Broad category of a listening service."""
    DEV = "dev"
    DATABASE = "database"
    INFRA = "infra"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ServiceInfo:
    """Service explanation for a port."""
    name: str
    description: str
    category: ServiceCategory

    def __str__(self) -> str:
        return f"{self.name} - {self.description}"


@dataclass(frozen=True)
class ProcessHint:
    """Service label implied by a process image name."""
    label: str
    category: ServiceCategory


@dataclass(frozen=True)
class Conflict:
    """A well-known port held by an unexpected service."""
    port: int
    process_name: str
    reason: str


_DEV = ServiceCategory.DEV
_DB = ServiceCategory.DATABASE
_INFRA = ServiceCategory.INFRA


# Well-known port to service mappings
PORT_DATABASE: dict[int, ServiceInfo] = {
    22: ServiceInfo("SSH", "Secure Shell", _INFRA),
    53: ServiceInfo("DNS", "Domain Name System", _INFRA),
    80: ServiceInfo("HTTP", "Web server", _INFRA),
    443: ServiceInfo("HTTPS", "Secure web server", _INFRA),
    1433: ServiceInfo("SQL Server", "Microsoft SQL Server", _DB),
    1521: ServiceInfo("Oracle DB", "Oracle Database", _DB),
    2181: ServiceInfo("ZooKeeper", "Apache ZooKeeper", _INFRA),
    3000: ServiceInfo("Dev Server", "Next.js, React, or Express", _DEV),
    3001: ServiceInfo("Dev Server", "Node.js (alternate port)", _DEV),
    3306: ServiceInfo("MySQL", "MySQL / MariaDB", _DB),
    4200: ServiceInfo("Angular", "Angular dev server", _DEV),
    4500: ServiceInfo("Dev Server", "Development server", _DEV),
    5000: ServiceInfo("Flask / ASP.NET", "Python or .NET dev server", _DEV),
    5173: ServiceInfo("Vite", "Vite dev server", _DEV),
    5174: ServiceInfo("Vite", "Vite dev server (alt)", _DEV),
    5432: ServiceInfo("PostgreSQL", "PostgreSQL database", _DB),
    5672: ServiceInfo("RabbitMQ", "Message broker", _INFRA),
    6379: ServiceInfo("Redis", "In-memory data store", _DB),
    6380: ServiceInfo("Redis", "Redis (alt port)", _DB),
    8000: ServiceInfo("Django / FastAPI", "Python web server", _DEV),
    8080: ServiceInfo("HTTP Proxy", "Proxy or Tomcat", _INFRA),
    8081: ServiceInfo("HTTP Alt", "Alternative HTTP service", _INFRA),
    8443: ServiceInfo("HTTPS Alt", "Alternative HTTPS", _INFRA),
    8888: ServiceInfo("Jupyter", "Jupyter Notebook", _DEV),
    9000: ServiceInfo("PHP-FPM", "PHP or SonarQube", _INFRA),
    9090: ServiceInfo("Prometheus", "Monitoring", _INFRA),
    9200: ServiceInfo("Elasticsearch", "Search engine API", _DB),
    9300: ServiceInfo("Elasticsearch", "Transport layer", _DB),
    15672: ServiceInfo("RabbitMQ UI", "Management console", _INFRA),
    27017: ServiceInfo("MongoDB", "MongoDB database", _DB),
}

# Process image names (lowercase, with and without .exe) to service labels
PROCESS_HINTS: dict[str, ProcessHint] = {}

for _label, _category, _images in (
    ("Node.js", _DEV, ("node",)),
    ("Python", _DEV, ("python", "python3")),
    ("Java", _DEV, ("java", "javaw")),
    ("Docker", _INFRA, ("docker", "com.docker.backend")),
    ("PostgreSQL", _DB, ("postgres",)),
    ("MySQL", _DB, ("mysqld",)),
    ("MongoDB", _DB, ("mongod",)),
    ("Redis", _DB, ("redis-server",)),
    ("Nginx", _INFRA, ("nginx",)),
    ("Apache", _INFRA, ("httpd",)),
    ("VS Code", _DEV, ("code",)),
    ("Cursor", _DEV, ("cursor",)),
    (".NET", _DEV, ("dotnet",)),
    ("Ruby", _DEV, ("ruby",)),
    ("Go", _DEV, ("go",)),
    ("Bun", _DEV, ("bun",)),
    ("Deno", _DEV, ("deno",)),
):
    for _image in _images:
        PROCESS_HINTS[_image] = ProcessHint(_label, _category)
        PROCESS_HINTS[f"{_image}.exe"] = ProcessHint(_label, _category)

# Port ranges commonly used by development and HTTP servers
DEV_PORT_RANGE = range(3000, 4000)
HTTP_PORT_RANGE = range(8000, 9000)
APP_PORT_RANGE = range(3000, 10000)

_EXE_SUFFIX = re.compile(r"\.exe$", re.IGNORECASE)


class _PortOwner(Protocol):
    port: int
    process_name: str


def _strip_exe(process_name: str) -> str:
    return _EXE_SUFFIX.sub("", process_name)


def get_port_label(port: int) -> Optional[ServiceInfo]:
    """Return the well-known service for a port, if any."""
    return PORT_DATABASE.get(port)


def get_process_hint(process_name: str) -> Optional[ProcessHint]:
    """Return the service label implied by a process name, if any."""
    return PROCESS_HINTS.get(process_name.lower())


def get_service_info(port: int, process_name: str) -> ServiceInfo:
    """
    Explain what is likely listening on a port.

    The well-known port database takes precedence for the service name;
    the process hint refines the description. Unknown ports fall back to
    range heuristics and finally to the bare process name.

    Args:
        port: Listening port number
        process_name: Image name of the owning process

    Returns:
        ServiceInfo describing the port
    """
    port_info = PORT_DATABASE.get(port)
    hint = get_process_hint(process_name)

    if port_info and hint:
        return ServiceInfo(
            port_info.name,
            f"{hint.label} · {port_info.description}",
            port_info.category,
        )

    if port_info:
        return port_info

    if hint:
        if port in APP_PORT_RANGE:
            return ServiceInfo(hint.label, f"Development server on :{port}", hint.category)
        return ServiceInfo(hint.label, process_name, hint.category)

    name = _strip_exe(process_name)
    if port in DEV_PORT_RANGE:
        return ServiceInfo(name, "Development server", ServiceCategory.DEV)
    if port in HTTP_PORT_RANGE:
        return ServiceInfo(name, "HTTP service", ServiceCategory.INFRA)

    return ServiceInfo(name, f"Port {port}", ServiceCategory.SYSTEM)


def explain_port(port: int, process_name: str) -> str:
    """One-line explanation, e.g. "PostgreSQL - PostgreSQL database"."""
    return str(get_service_info(port, process_name))


def detect_conflicts(entries: Iterable[_PortOwner]) -> list[Conflict]:
    """
    Find well-known ports held by a recognised process of another service.

    Only ports in the database owned by processes with a known hint are
    considered, so unknown processes never produce false alarms.

    Args:
        entries: Objects with port and process_name (e.g. PortEntry)

    Returns:
        Conflicts in input order
    """
    conflicts: list[Conflict] = []

    for entry in entries:
        known = PORT_DATABASE.get(entry.port)
        if not known:
            continue

        hint = get_process_hint(entry.process_name)
        if not hint:
            continue

        # Dev tooling on a dev port is expected, whatever the framework
        if known.category is ServiceCategory.DEV and hint.category is ServiceCategory.DEV:
            continue

        expected = known.name.lower()
        label = hint.label.lower()
        first_word = label.split(" ")[0]

        if expected not in label and first_word not in expected:
            conflicts.append(Conflict(
                port=entry.port,
                process_name=entry.process_name,
                reason=f"Port {entry.port} is typically {known.name}, but occupied by {hint.label}",
            ))

    return conflicts
