"""
Task Identifier
Decodes the colon-delimited UPID that Proxmox uses as task log file name
"""

import string
from datetime import datetime, tzinfo
from typing import Optional
from dataclasses import dataclass

UNKNOWN_TIMESTAMP = "Unknown"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_HEX_DIGITS = set(string.hexdigits)


def decode_hex_timestamp(value: str) -> Optional[int]:
    """Return epoch seconds for an 8-digit hex string, None otherwise"""
    if not isinstance(value, str) or len(value) != 8:
        return None
    if not all(c in _HEX_DIGITS for c in value):
        return None
    return int(value, 16)


def format_epoch(epoch: Optional[int], tz: Optional[tzinfo] = None) -> str:
    """Format epoch seconds in local time (or tz), 'Unknown' on failure"""
    if epoch is None:
        return UNKNOWN_TIMESTAMP
    try:
        if tz is None:
            moment = datetime.fromtimestamp(epoch)
        else:
            moment = datetime.fromtimestamp(epoch, tz)
    except (OverflowError, OSError, ValueError):
        return UNKNOWN_TIMESTAMP
    return moment.strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class TaskIdentifier:
    """Parsed UPID

    Layout: UPID:node:pid:starttime:timestamp:type:vmid:user:
    Any field may be empty when the name is malformed.
    """
    prefix: str = ""
    node: str = ""
    pid: str = ""
    starttime: str = ""
    hex_timestamp: str = ""
    task_type: str = ""
    target_id: str = ""
    user: str = ""
    rest: str = ""

    FIELD_COUNT = 8

    @classmethod
    def parse(cls, name: str) -> "TaskIdentifier":
        """Split a file basename into identifier fields; never raises"""
        if not isinstance(name, str):
            name = ""

        parts = name.split(":", cls.FIELD_COUNT)
        parts += [""] * (cls.FIELD_COUNT + 1 - len(parts))

        return cls(*parts)

    @property
    def epoch(self) -> Optional[int]:
        return decode_hex_timestamp(self.hex_timestamp)

    @property
    def is_batch(self) -> bool:
        """True when no single target was given (all-VMs job)"""
        return not self.target_id.strip()

    def readable_timestamp(self, tz: Optional[tzinfo] = None) -> str:
        return format_epoch(self.epoch, tz)

