import os
import subprocess
import threading

import pytest

from csi_s3.config import BackendConfig, Settings, VolumeLocation
from csi_s3.mounter import mount_utils

def pytest_configure(config):
    """Configure test environment."""
    # keep waits short for anything built from the environment
    os.environ.setdefault("CSI_S3_MOUNT_TIMEOUT", "1")
    config.addinivalue_line("markers", "root: needs root to perform real mounts")

class FakeSystem:
    """
    Stands in for the external commands run by mount_utils.

    Keeps a set of mounted paths, records every command and can be told to
    fail a command with a given return code and stderr.
    """

    def __init__(self, s3fs_command="s3fs"):
        self.s3fs_command = s3fs_command
        self.mounted = set()
        self.calls = []
        self.failures = {}
        self.on_s3fs = None
        self._lock = threading.Lock()

    def fail(self, command, returncode=1, stderr="boom"):
        self.failures[command] = (returncode, stderr)

    def commands(self, name):
        return [c for c in self.calls if c[0] == name]

    def run(self, cmd, check=False, capture_output=False, text=False, **kwargs):
        cmd = list(cmd)
        name = cmd[0]
        with self._lock:
            self.calls.append(cmd)

        if name in self.failures:
            returncode, stderr = self.failures[name]
            if check:
                raise subprocess.CalledProcessError(returncode, cmd, output="", stderr=stderr)
            return subprocess.CompletedProcess(cmd, returncode, "", stderr)

        returncode = 0
        if name == "mountpoint":
            returncode = 0 if cmd[-1].rstrip("/") in self.mounted else 1
        elif name == self.s3fs_command:
            if self.on_s3fs is not None:
                self.on_s3fs(cmd)
            with self._lock:
                self.mounted.add(cmd[2].rstrip("/"))
        elif name in ("fusermount", "umount"):
            with self._lock:
                self.mounted.discard(cmd[-1].rstrip("/"))
        elif name == "mount":
            with self._lock:
                self.mounted.add(cmd[-1].rstrip("/"))
        return subprocess.CompletedProcess(cmd, returncode, "", "")

@pytest.fixture
def fake_system(monkeypatch):
    """Replace external commands with a FakeSystem."""
    system = FakeSystem()
    monkeypatch.setattr(mount_utils.subprocess, "run", system.run)
    monkeypatch.setattr(mount_utils, "find_fuse_mount_process", lambda path, command=None: None)
    monkeypatch.setattr(mount_utils, "POLL_INTERVAL", 0.01)
    return system

@pytest.fixture
def home_dir(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home

@pytest.fixture
def settings(home_dir, tmp_path):
    return Settings(
        home_dir=str(home_dir),
        cache_root=str(tmp_path / "cache"),
        mount_timeout=0.2,
    )

@pytest.fixture
def backend():
    return BackendConfig(
        endpoint="https://s3.example.com",
        region="us-east-1",
        access_key_id="AKIAEXAMPLE",
        secret_access_key="s3cr3t/key",
    )

@pytest.fixture
def location():
    return VolumeLocation(
        bucket_name="data",
        prefix="pvc-1",
        fs_path="files",
        extra_options="-o use_cache=${cacheDir} -o multireq_max=5",
    )
