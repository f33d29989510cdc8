"""
Log Reader
Tolerant read access to task log files and the task log directory
"""

import fnmatch
import logging
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Pattern

from .config import LogPathError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskLogFile:
    """One task log on disk; only ever read"""
    path: Path
    modified_time: float

    @property
    def identifier(self) -> str:
        return self.path.name


def read_lines(path) -> Optional[List[str]]:
    """Read all lines of a log, None if it is missing or unreadable"""
    try:
        with open(path, 'r', encoding='utf-8', errors='replace', newline='\n') as f:
            return [line.rstrip('\r\n') for line in f]
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None


def tail_lines(path, count: int) -> Optional[List[str]]:
    """Return only the last `count` lines of a log, None if unreadable"""
    try:
        with open(path, 'r', encoding='utf-8', errors='replace', newline='\n') as f:
            return [line.rstrip('\r\n') for line in deque(f, maxlen=count)]
    except OSError as e:
        logger.debug("Cannot read tail of %s: %s", path, e)
        return None


class LogText:
    """Line-oriented searches over a whole log

    A log that could not be read behaves as an empty one, so every search
    reports "not found" instead of raising.
    """

    def __init__(self, lines: Optional[List[str]]):
        self.available = lines is not None
        self.lines = lines or []

    @classmethod
    def from_path(cls, path) -> "LogText":
        return cls(read_lines(path))

    def search(self, pattern: Pattern):
        """First match object, or None"""
        for line in self.lines:
            match = pattern.search(line)
            if match:
                return match
        return None

    def last(self, pattern: Pattern):
        """Last match object, or None"""
        for line in reversed(self.lines):
            match = pattern.search(line)
            if match:
                return match
        return None

    def contains(self, pattern: Pattern) -> bool:
        return self.search(pattern) is not None

    def count(self, pattern: Pattern) -> int:
        """Number of matching lines (like rg -c)"""
        return sum(1 for line in self.lines if pattern.search(line))


def find_task_logs(root, file_glob: str, limit: int) -> List[TaskLogFile]:
    """Most recently modified task logs under root, newest first

    Args:
        root: Log root directory, searched recursively
        file_glob: Basename pattern for backup task logs
        limit: Maximum number of files to return

    Returns:
        Up to `limit` TaskLogFile records sorted by mtime descending
    """
    found = []

    def on_walk_error(error: OSError):
        if error.filename is None or Path(error.filename) == Path(root):
            raise LogPathError(str(root), f"is not readable: {error.strerror or error}")
        logger.debug("Skipping unreadable directory %s: %s", error.filename, error)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=on_walk_error):
        for filename in fnmatch.filter(filenames, file_glob):
            path = Path(dirpath) / filename
            try:
                stat = path.stat()
            except OSError as e:
                # Removed between listing and stat
                logger.debug("Skipping %s: %s", path, e)
                continue
            if not path.is_file():
                continue
            found.append(TaskLogFile(path=path, modified_time=stat.st_mtime))

    found.sort(key=lambda log: (log.modified_time, str(log.path)), reverse=True)
    logger.debug("Found %d task logs matching %s under %s", len(found), file_glob, root)

    return found[:limit]
