"""
Backup Status Report
Selects the most recent vzdump task logs and renders them as a table
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .color_mode import ColorMode
from .config import ReporterConfig
from .detail_extractor import DetailExtractor, TaskScope, LOG_NOT_FOUND
from .log_reader import TaskLogFile, find_task_logs
from .outcome import OutcomeClassifier, TaskOutcome
from .task_identifier import TaskIdentifier

logger = logging.getLogger(__name__)

# Pipes and cron get one line per task, never wrapped or cropped
UNWRAPPED_WIDTH = 1000

TIPS = [
    "View detailed log: cat /var/log/pve/tasks/$HASH/$UPID",
    "Monitor real-time: tail -f /var/log/pve/tasks/active",
    "Check specific VM: rg 'vmid.*123' /var/log/pve/tasks/*/*vzdump*",
    "View all errors: rg 'ERROR:' /var/log/pve/tasks/*/*vzdump* | tail -20",
    "Check backup storage: pvesm status",
    "Run with plain text: pve-backup-status --no-color",
]


@dataclass(frozen=True)
class ReportRow:
    """One rendered task: outcome, start time, scope and details"""
    outcome: TaskOutcome
    timestamp: str
    scope: TaskScope
    details: str
    identifier: str = ""
    duration_minutes: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            "status": self.outcome.value,
            "timestamp": self.timestamp,
            "scope": self.scope.label,
            "details": self.details,
            "upid": self.identifier,
            "duration_minutes": self.duration_minutes,
        }


class BackupStatusReport:
    """Builds and prints the backup status table"""

    def __init__(self, config: ReporterConfig, color_mode: ColorMode, console: Optional[Console] = None):
        """Initialize report

        Args:
            config: Reporter settings (log root, entry count, markers)
            color_mode: Resolved color decision
            console: Console to print to (default: stdout)
        """
        self.config = config
        self.color_mode = color_mode
        self.console = console or self.create_console(color_mode)

        self.classifier = OutcomeClassifier(config.markers, config.tail_lines)
        self.extractor = DetailExtractor(config.markers)

    @staticmethod
    def create_console(color_mode: ColorMode, file=None, width: Optional[int] = None) -> Console:
        """Console that writes escape sequences only when color is enabled"""
        console = Console(
            file=file,
            width=width,
            color_system=color_mode.color_system,
            no_color=not color_mode.enabled,
            highlight=False,
            emoji=False,
            soft_wrap=False,
        )
        if width is None and not console.is_terminal:
            console.width = UNWRAPPED_WIDTH
        return console

    def collect(self) -> List[ReportRow]:
        """Rows for the most recent N task logs, newest first

        Raises:
            LogPathError: If the log root does not exist
        """
        root = self.config.validate_log_path()
        logs = find_task_logs(root, self.config.markers.file_glob, self.config.num_entries)

        return [self.build_row(log) for log in logs]

    def build_row(self, log: TaskLogFile) -> ReportRow:
        """Decode, classify and extract one task; never raises"""
        identifier = TaskIdentifier.parse(log.identifier)

        try:
            outcome = self.classifier.classify(log.path)
            result = self.extractor.extract(identifier, log.path)
        except Exception as e:
            logger.warning("Failed to analyse %s: %s", log.path, e)
            return ReportRow(
                outcome=TaskOutcome.UNKNOWN,
                timestamp=identifier.readable_timestamp(),
                scope=TaskScope.unknown(),
                details=LOG_NOT_FOUND,
                identifier=log.identifier,
            )

        return ReportRow(
            outcome=outcome,
            timestamp=identifier.readable_timestamp(),
            scope=result.scope,
            details=result.details,
            identifier=log.identifier,
            duration_minutes=result.duration_minutes,
        )

    @staticmethod
    def get_summary_stats(rows: List[ReportRow]) -> Dict:
        """Calculate summary statistics

        Returns:
            Dictionary with per-outcome counts and total backup minutes
        """
        counts = {outcome.value: 0 for outcome in TaskOutcome}
        for row in rows:
            counts[row.outcome.value] += 1

        return {
            "total_tasks": len(rows),
            "ok": counts[TaskOutcome.OK.value],
            "error": counts[TaskOutcome.ERROR.value],
            "unknown": counts[TaskOutcome.UNKNOWN.value],
            "total_minutes": sum(r.duration_minutes or 0 for r in rows),
        }

    def build_table(self, rows: List[ReportRow]) -> Table:
        table = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False, header_style="bold")
        table.add_column("STATUS", no_wrap=True, min_width=9)
        table.add_column("TIMESTAMP", no_wrap=True, min_width=19)
        table.add_column("SCOPE", no_wrap=True, overflow="ignore", min_width=12)
        table.add_column("DETAILS", no_wrap=True, overflow="ignore")

        for row in rows:
            table.add_row(
                Text(row.outcome.label, style=row.outcome.style),
                Text(row.timestamp),
                Text(row.scope.label),
                Text(row.details),
            )

        return table

    def render(self, rows: List[ReportRow]):
        """Print title, table, summary and tips"""
        title = f"Proxmox Backup Status - Last {self.config.num_entries} Tasks"
        self.console.print(Text(title, style="bold cyan"))
        self.console.print(Text("=" * len(title), style="cyan"))
        self.console.print(self.build_table(rows), crop=False)

        stats = self.get_summary_stats(rows)
        summary = Text("Summary: ")
        summary.append(f"{stats['ok']} OK", style=TaskOutcome.OK.style)
        summary.append(", ")
        summary.append(f"{stats['error']} ERROR", style=TaskOutcome.ERROR.style)
        summary.append(", ")
        summary.append(f"{stats['unknown']} UNKNOWN", style=TaskOutcome.UNKNOWN.style)
        self.console.print(summary)

        self.console.print()
        self.console.print(Text("💡 Tips:", style="bold yellow"))
        for tip in TIPS:
            self.console.print(Text(f"  • {tip}"))

    def to_json(self, rows: List[ReportRow]) -> str:
        return json.dumps({
            "log_path": self.config.log_path,
            "summary": self.get_summary_stats(rows),
            "tasks": [row.to_dict() for row in rows],
        }, indent=2, ensure_ascii=False)

    def run(self, as_json: bool = False):
        rows = self.collect()
        if as_json:
            self.console.out(self.to_json(rows), highlight=False)
        else:
            self.render(rows)
        return rows
