"""
pve-backup-status - CLI Entry Point
Shows the outcome of the most recent Proxmox vzdump backup tasks
"""

import sys
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .color_mode import ColorMode
from .config import ConfigError, DEFAULT_NUM_ENTRIES, build_config
from .report import BackupStatusReport

logger = logging.getLogger(__name__)


class ReportArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    if not value.isdigit() or int(value) <= 0:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}")
    return int(value)


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = ReportArgumentParser(
        prog="pve-backup-status",
        allow_abbrev=False,
        description="Proxmox backup status - summarise the most recent vzdump task logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  LOG_PATH                  Task log root (default: /var/log/pve/tasks)
  NO_COLOR                  Disable colored output when set
  PVE_BACKUP_STATUS_CONFIG  YAML file overriding log markers

Examples:
  # Last 10 backup tasks
  pve-backup-status

  # Last 25 tasks without colors
  pve-backup-status 25 --no-color
        """
    )

    parser.add_argument(
        'count',
        nargs='?',
        type=positive_int,
        default=DEFAULT_NUM_ENTRIES,
        help=f'Number of most recent tasks to show (default: {DEFAULT_NUM_ENTRIES})'
    )
    parser.add_argument(
        '--no-color', '--plain',
        dest='no_color',
        action='store_true',
        help='Disable colored output'
    )
    parser.add_argument(
        '--config',
        help='YAML file with log path and marker overrides'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the report as JSON'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Debug logging on stderr'
    )

    return parser


def setup_logging(verbose: bool = False, color_mode: Optional[ColorMode] = None):
    """Route log records to stderr through rich"""
    color_mode = color_mode or ColorMode()
    handler = RichHandler(
        console=Console(stderr=True, color_system=color_mode.color_system, no_color=not color_mode.enabled),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


def main(argv: Optional[List[str]] = None, stdout=None) -> int:
    """Main entry point; returns the process exit code"""
    parser = create_parser()
    args = parser.parse_args(argv)

    color_mode = ColorMode.detect(
        force_plain=args.no_color or args.json,
        stream=stdout or sys.stdout,
    )
    setup_logging(args.verbose, ColorMode.detect(force_plain=args.no_color, stream=sys.stderr))

    try:
        config = build_config(num_entries=args.count, config_file=args.config)
        console = BackupStatusReport.create_console(color_mode, file=stdout)
        report = BackupStatusReport(config, color_mode, console=console)
        logger.debug("Scanning %s for %d most recent tasks", config.log_path, config.num_entries)
        report.run(as_json=args.json)

    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1

    return 0


def run():
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
