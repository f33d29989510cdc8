"""
PVE Backup Status
Read-only report of recent Proxmox vzdump backup tasks
"""

__version__ = "1.0.0"

from .config import ReporterConfig, MarkerVocabulary, ConfigError, LogPathError, load_config
from .task_identifier import TaskIdentifier
from .outcome import OutcomeClassifier, TaskOutcome
from .detail_extractor import DetailExtractor, TaskScope
from .color_mode import ColorMode
from .report import BackupStatusReport, ReportRow

__all__ = [
    "ReporterConfig",
    "MarkerVocabulary",
    "ConfigError",
    "LogPathError",
    "load_config",
    "TaskIdentifier",
    "OutcomeClassifier",
    "TaskOutcome",
    "DetailExtractor",
    "TaskScope",
    "ColorMode",
    "BackupStatusReport",
    "ReportRow"
]
