import errno
import os
import subprocess
import sys

import pytest

from csi_s3.exceptions import CleanupError, DirectoryRemovalError, InvocationError
from csi_s3.mounter import mount_utils

def test_is_mountpoint_missing_path(fake_system, tmp_path):
    assert not mount_utils.is_mountpoint(str(tmp_path / "missing"))
    assert fake_system.commands("mountpoint") == []

def test_is_mountpoint_uses_mountpoint_command(fake_system, tmp_path):
    fake_system.mounted.add(str(tmp_path))
    assert mount_utils.is_mountpoint(str(tmp_path))
    assert fake_system.commands("mountpoint") == [["mountpoint", "-q", str(tmp_path)]]

def test_is_mountpoint_detects_corrupted_mount(fake_system, tmp_path, monkeypatch):
    real_stat = os.stat

    def broken_stat(path, *args, **kwargs):
        if path == str(tmp_path):
            raise OSError(errno.ENOTCONN, "Transport endpoint is not connected", path)
        return real_stat(path, *args, **kwargs)
    monkeypatch.setattr(mount_utils.os, "stat", broken_stat)
    assert mount_utils.is_mountpoint(str(tmp_path))

def test_wait_for_mount_times_out(fake_system, tmp_path):
    with pytest.raises(InvocationError) as exc_info:
        mount_utils.wait_for_mount(str(tmp_path), 0.05, command="s3fs")
    assert exc_info.value.timed_out
    assert exc_info.value.command == "s3fs"

def test_fuse_unmount_waits_for_process(fake_system, tmp_path, monkeypatch):
    fake_system.mounted.add(str(tmp_path))
    waited = []
    monkeypatch.setattr(mount_utils, "find_fuse_mount_process", lambda path, command=None: 4242)
    monkeypatch.setattr(mount_utils, "wait_for_process", lambda pid, timeout: waited.append((pid, timeout)))
    mount_utils.fuse_unmount(str(tmp_path) + "/", 3)
    assert fake_system.commands("fusermount") == [["fusermount", "-u", str(tmp_path)]]
    assert waited == [(4242, 3)]

def test_wait_for_process_already_gone():
    # pid 0 has no /proc entry
    assert mount_utils.wait_for_process(0, 0.05)

def test_wait_for_process_times_out_on_live_process():
    assert not mount_utils.wait_for_process(os.getpid(), 0.05)

def test_find_fuse_mount_process_no_match(tmp_path):
    assert mount_utils.find_fuse_mount_process(str(tmp_path / "nobody-mounts-this")) is None

needs_proc = pytest.mark.skipif(not os.path.exists("/proc/self/cmdline"), reason="needs /proc")

@needs_proc
def test_find_fuse_mount_process_skips_caller():
    with open("/proc/self/cmdline", "rb") as f:
        own_args = [a.decode() for a in f.read().split(b"\0") if a]
    if len(own_args) < 2:
        pytest.skip("no arguments to look for")
    assert mount_utils.find_fuse_mount_process(own_args[-1]) != os.getpid()

@needs_proc
def test_find_fuse_mount_process_matches_command(tmp_path):
    proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)", str(tmp_path)])
    try:
        assert mount_utils.find_fuse_mount_process(str(tmp_path), command=sys.executable) == proc.pid
        assert mount_utils.find_fuse_mount_process(str(tmp_path), command="s3fs") is None
    finally:
        proc.kill()
        proc.wait()

def test_cleanup_mount_point_missing(fake_system, tmp_path):
    mount_utils.cleanup_mount_point(str(tmp_path / "missing"))
    assert fake_system.calls == []

def test_cleanup_mount_point_umount_failure(fake_system, tmp_path):
    fake_system.mounted.add(str(tmp_path))
    fake_system.fail("umount", returncode=32, stderr="target is busy")
    with pytest.raises(CleanupError) as exc_info:
        mount_utils.cleanup_mount_point(str(tmp_path))
    assert exc_info.value.target == str(tmp_path)
    assert tmp_path.exists()

def test_remove_dir(tmp_path):
    target = tmp_path / "d"
    target.mkdir()
    mount_utils.remove_dir(str(target))
    mount_utils.remove_dir(str(target))
    assert not target.exists()

def test_remove_dir_not_empty(tmp_path):
    (tmp_path / "f").write_text("x")
    with pytest.raises(DirectoryRemovalError) as exc_info:
        mount_utils.remove_dir(str(tmp_path))
    assert exc_info.value.path == str(tmp_path)
