#!/usr/bin/env python
"""
PortHound - Listening port and process inspector

Lists which processes own which listening ports on Windows and
force-kills processes by port or PID.

Usage:
    python porthound.py COMMAND [OPTIONS]

Examples:
    python porthound.py ports
    python porthound.py ports -c dev --export ports.csv
    python porthound.py processes -n 20
    python porthound.py kill-port 3000
    python porthound.py kill-pid 4242 --yes

Requirements:
    - Windows 10/11 (netstat, tasklist, wmic, taskkill)
    - Python 3.11+
    - pip install -e .
"""

import sys

from hound.cli import main

if __name__ == "__main__":
    sys.exit(main())
