"""
Task Outcome Classifier
Decides OK / ERROR / UNKNOWN from the last few lines of a task log
"""

from enum import Enum
from typing import Iterable, Optional

from .config import MarkerVocabulary, DEFAULT_TAIL_LINES
from .log_reader import tail_lines


class TaskOutcome(Enum):
    OK = "OK"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        return {
            TaskOutcome.OK: "✓ OK",
            TaskOutcome.ERROR: "✗ ERROR",
            TaskOutcome.UNKNOWN: "? UNKNOWN",
        }[self]

    @property
    def style(self) -> str:
        return {
            TaskOutcome.OK: "green",
            TaskOutcome.ERROR: "red",
            TaskOutcome.UNKNOWN: "bold yellow",
        }[self]


class OutcomeClassifier:
    """Classify a task by its completion marker

    Only a bounded tail window is inspected; a marker earlier in the file
    does not count.
    """

    def __init__(self, markers: Optional[MarkerVocabulary] = None, tail_lines: int = DEFAULT_TAIL_LINES):
        self.markers = markers or MarkerVocabulary()
        self.tail_lines = tail_lines

    def classify(self, path) -> TaskOutcome:
        """Classify a log file; missing or unreadable files are UNKNOWN"""
        window = tail_lines(path, self.tail_lines)
        if window is None:
            return TaskOutcome.UNKNOWN
        return self.classify_lines(window)

    def classify_lines(self, lines: Iterable[str]) -> TaskOutcome:
        """Classify the last `tail_lines` lines of an in-memory log"""
        window = list(lines)[-self.tail_lines:]

        ok = self.markers.pattern("task_ok")
        if any(ok.search(line) for line in window):
            return TaskOutcome.OK

        error = self.markers.pattern("task_error")
        if any(error.search(line) for line in window):
            return TaskOutcome.ERROR

        return TaskOutcome.UNKNOWN
