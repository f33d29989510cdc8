"""
Reporter Configuration
Marker vocabulary and runtime settings, optionally loaded from YAML
"""

import os
import re
import yaml
from pathlib import Path
from typing import Dict, Optional, Pattern
from dataclasses import dataclass, field, fields

DEFAULT_LOG_PATH = "/var/log/pve/tasks"
DEFAULT_NUM_ENTRIES = 10
DEFAULT_TAIL_LINES = 5
CONFIG_ENV_VAR = "PVE_BACKUP_STATUS_CONFIG"


class ConfigError(Exception):
    """Fatal configuration problem; the report is not produced"""


class LogPathError(ConfigError):
    """The configured log root is missing or cannot be listed"""

    def __init__(self, log_path, reason="does not exist"):
        self.log_path = log_path
        super().__init__(f"Log path '{log_path}' {reason}")


@dataclass
class MarkerVocabulary:
    """Patterns recognised in vzdump task logs

    The log format belongs to Proxmox and is not versioned, so every
    marker is a regular expression that can be overridden from YAML.
    """
    task_ok: str = r"TASK OK"
    task_error: str = r"TASK ERROR"
    target_name: str = r"INFO: (CT|VM) Name:\s*(?P<name>.+)"
    batch_item_start: str = r"INFO: Starting Backup of VM"
    job_errors: str = r"job errors"
    failure_line: str = r"TASK ERROR|ERROR:"
    error_line: str = r"ERROR:"
    item_success: str = r"Finished Backup of VM.*successfully"
    generic_success: str = r"successfully"
    backup_started: str = r"INFO: Backup started at (?P<timestamp>.+)"
    backup_finished: str = r"INFO: Backup finished at (?P<timestamp>.+)"
    file_glob: str = "*vzdump*"
    _compiled: Dict[str, Pattern] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Compile every regex marker up front"""
        for name in self.pattern_names():
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"Marker '{name}' must be a non-empty string")
            try:
                self._compiled[name] = re.compile(value)
            except re.error as e:
                raise ConfigError(f"Marker '{name}' is not a valid regex: {e}")

    @classmethod
    def pattern_names(cls):
        return [f.name for f in fields(cls) if f.init and f.name != "file_glob"]

    def pattern(self, name: str) -> Pattern:
        return self._compiled[name]


@dataclass
class ReporterConfig:
    """Runtime settings for one report run"""
    log_path: str = DEFAULT_LOG_PATH
    num_entries: int = DEFAULT_NUM_ENTRIES
    tail_lines: int = DEFAULT_TAIL_LINES
    markers: MarkerVocabulary = field(default_factory=MarkerVocabulary)

    def __post_init__(self):
        if not isinstance(self.num_entries, int) or self.num_entries < 1:
            raise ConfigError(f"Number of entries must be a positive integer, got {self.num_entries!r}")
        if not isinstance(self.tail_lines, int) or self.tail_lines < 1:
            raise ConfigError(f"tail_lines must be a positive integer, got {self.tail_lines!r}")

    def validate_log_path(self) -> Path:
        """Return the log root, raising LogPathError if it cannot be listed"""
        root = Path(self.log_path)
        if not root.is_dir():
            raise LogPathError(self.log_path)
        if not os.access(root, os.R_OK | os.X_OK):
            raise LogPathError(self.log_path, "is not readable")
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise LogPathError(self.log_path, f"is not readable: {e.strerror or e}")
        return root


def load_config(file_path: str) -> Dict:
    """Load reporter settings from a YAML file

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary of ReporterConfig keyword arguments

    Raises:
        ConfigError: If the file is missing, invalid, or has unknown keys
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {file_path}")

    with open(file_path, 'r') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {file_path} must contain a mapping at root level")

    allowed = {"log_path", "tail_lines", "markers"}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigError(f"Unknown config keys in {file_path}: {', '.join(sorted(unknown))}")

    settings = {}
    if "log_path" in data:
        settings["log_path"] = str(data["log_path"])
    if "tail_lines" in data:
        settings["tail_lines"] = data["tail_lines"]

    markers = data.get("markers") or {}
    if not isinstance(markers, dict):
        raise ConfigError("'markers' must be a mapping")
    valid_markers = set(MarkerVocabulary.pattern_names()) | {"file_glob"}
    bad = set(markers) - valid_markers
    if bad:
        raise ConfigError(f"Unknown markers: {', '.join(sorted(bad))}")
    settings["markers"] = MarkerVocabulary(**markers)

    return settings


def build_config(num_entries: int = DEFAULT_NUM_ENTRIES,
                 config_file: Optional[str] = None,
                 environ: Optional[Dict[str, str]] = None) -> ReporterConfig:
    """Assemble ReporterConfig from defaults, config file and environment

    Precedence: defaults < config file < LOG_PATH environment variable.
    """
    if environ is None:
        environ = os.environ

    config_file = config_file or environ.get(CONFIG_ENV_VAR)
    settings = load_config(config_file) if config_file else {}

    if environ.get("LOG_PATH"):
        settings["log_path"] = environ["LOG_PATH"]

    return ReporterConfig(num_entries=num_entries, **settings)
