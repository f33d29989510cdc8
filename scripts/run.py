#!/usr/bin/env python3
"""
PVE Backup Status - source checkout launcher
Runs the CLI without installing the package
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pve_backup_status.cli import main


if __name__ == "__main__":
    sys.exit(main())
