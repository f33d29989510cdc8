"""
Shared fixtures for building fake /var/log/pve/tasks trees
"""
import os
import shutil
import tempfile
import unittest
from pathlib import Path

BATCH_UPID = "UPID:pve1:000A1B2C:0F00AA11:5F000000:vzdump::root@pam:"
SINGLE_UPID = "UPID:nodeA:1234:00000000:5F000000:vzdump:101:root@pam:"


def upid(hex_timestamp="5F000000", vmid="", node="pve1", task_type="vzdump"):
    return f"UPID:{node}:0001E240:0A1B2C3D:{hex_timestamp}:{task_type}:{vmid}:root@pam:"


class TaskLogTestCase(unittest.TestCase):
    """Creates a temporary log root, removed after each test"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.log_root = Path(self.temp_dir) / "tasks"
        self.log_root.mkdir()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write_log(self, name, lines, subdir="5", mtime=None):
        directory = self.log_root / subdir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path
