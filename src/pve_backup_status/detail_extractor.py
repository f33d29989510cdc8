"""
Task Detail Extractor
Scans a whole task log for scope, per-VM results and backup duration
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .config import MarkerVocabulary
from .log_reader import LogText
from .task_identifier import TaskIdentifier

logger = logging.getLogger(__name__)

LOG_NOT_FOUND = "Log not found"

# Formats seen in "Backup started at ..." lines across PVE releases
LOG_TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%a %b %d %H:%M:%S %Y",
    "%a %d %b %Y %H:%M:%S",
]


class ScopeKind(Enum):
    SINGLE = "single"
    BATCH = "batch"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TaskScope:
    """What a backup task covered"""
    kind: ScopeKind
    target_id: str = ""
    display_name: Optional[str] = None
    processed_count: Optional[int] = None

    @classmethod
    def single(cls, target_id: str, display_name: Optional[str] = None) -> "TaskScope":
        return cls(ScopeKind.SINGLE, target_id=target_id, display_name=display_name or None)

    @classmethod
    def batch(cls, processed_count: Optional[int] = None) -> "TaskScope":
        if processed_count is not None and processed_count <= 0:
            processed_count = None
        return cls(ScopeKind.BATCH, processed_count=processed_count)

    @classmethod
    def unknown(cls) -> "TaskScope":
        return cls(ScopeKind.UNKNOWN)

    @property
    def label(self) -> str:
        if self.kind is ScopeKind.SINGLE:
            label = f"VM {self.target_id}"
            if self.display_name:
                label += f" ({self.display_name})"
            return label
        if self.kind is ScopeKind.BATCH:
            if self.processed_count:
                return f"All VMs ({self.processed_count} VMs)"
            return "All VMs"
        return "Unknown"


@dataclass(frozen=True)
class TaskDetailsResult:
    scope: TaskScope
    details: str
    duration_minutes: Optional[int] = None


def _match_value(match, group: str) -> str:
    """Named group if the pattern has one, otherwise the text after the match"""
    if match is None:
        return ""
    value = match.groupdict().get(group)
    if value is None:
        value = match.string[match.end():]
    return value.strip()


def parse_log_timestamp(value: str) -> Optional[datetime]:
    """Parse a vzdump start/finish timestamp, None if no format fits"""
    value = (value or "").strip()
    if not value:
        return None

    for fmt in LOG_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


# (name, predicate, extractor); the first rule whose predicate holds decides
DetailRule = Tuple[str, Callable[["DetailExtractor", LogText], bool],
                   Callable[["DetailExtractor", LogText], Optional[str]]]


class DetailExtractor:
    """Derive TaskScope and the details column from full log content"""

    def __init__(self, markers: Optional[MarkerVocabulary] = None):
        self.markers = markers or MarkerVocabulary()

    def extract(self, identifier: TaskIdentifier, path) -> TaskDetailsResult:
        """Scope and details for one task log

        A missing log yields scope "Unknown" and details "Log not found".
        """
        log = LogText.from_path(path)
        if not log.available:
            return TaskDetailsResult(scope=TaskScope.unknown(), details=LOG_NOT_FOUND)

        return self.extract_from_log(identifier, log)

    def extract_from_log(self, identifier: TaskIdentifier, log: LogText) -> TaskDetailsResult:
        scope = self.resolve_scope(identifier, log)
        details = self.resolve_details(log)

        minutes = self.duration_minutes(log)
        if minutes is not None:
            details = f"{details} ({minutes}m)"

        return TaskDetailsResult(scope=scope, details=details, duration_minutes=minutes)

    def resolve_scope(self, identifier: TaskIdentifier, log: LogText) -> TaskScope:
        if not identifier.is_batch:
            name_match = log.search(self.markers.pattern("target_name"))
            return TaskScope.single(identifier.target_id.strip(), _match_value(name_match, "name"))

        return TaskScope.batch(log.count(self.markers.pattern("batch_item_start")))

    # --- Details rules -----------------------------------------------------

    def _has_job_errors(self, log: LogText) -> bool:
        return log.contains(self.markers.pattern("job_errors"))

    def _job_error_summary(self, log: LogText) -> Optional[str]:
        failed = log.count(self.markers.pattern("failure_line"))
        succeeded = log.count(self.markers.pattern("item_success"))
        if failed > 0 or succeeded > 0:
            return f"✓{succeeded} ✗{failed}"
        return "Some failed"

    def _has_error_lines(self, log: LogText) -> bool:
        return log.contains(self.markers.pattern("error_line"))

    def _error_count(self, log: LogText) -> Optional[str]:
        return f"{log.count(self.markers.pattern('error_line'))} errors"

    def _has_success(self, log: LogText) -> bool:
        return log.contains(self.markers.pattern("generic_success"))

    def _success(self, log: LogText) -> Optional[str]:
        return "Success"

    DETAIL_RULES: List[DetailRule] = [
        ("job_errors", _has_job_errors, _job_error_summary),
        ("error_lines", _has_error_lines, _error_count),
        ("success", _has_success, _success),
    ]

    def resolve_details(self, log: LogText) -> str:
        """Apply DETAIL_RULES in order; only the first matching rule is used"""
        for name, predicate, extractor in self.DETAIL_RULES:
            if predicate(self, log):
                logger.debug("Details rule '%s' matched", name)
                return extractor(self, log) or ""
        return ""

    def duration_minutes(self, log: LogText) -> Optional[int]:
        """Whole minutes between first start line and last finish line"""
        finished = log.last(self.markers.pattern("backup_finished"))
        if finished is None:
            return None
        started = log.search(self.markers.pattern("backup_started"))

        start = parse_log_timestamp(_match_value(started, "timestamp"))
        end = parse_log_timestamp(_match_value(finished, "timestamp"))
        if start is None or end is None:
            return None

        try:
            seconds = int((end - start).total_seconds())
        except TypeError:
            # Mixed naive and aware ISO timestamps
            return None
        if seconds <= 0:
            return None
        return seconds // 60
