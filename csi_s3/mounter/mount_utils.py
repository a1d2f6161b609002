# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Mount utilities for the CSI S3 mounter.

This module provides functions for starting a FUSE translation tool,
waiting for its mount to show up, tearing FUSE and bind mounts down again
and removing the directories left behind.
"""

import errno
import os
import subprocess
import time

from ..exceptions import BindMountError, CleanupError, DirectoryRemovalError, InvocationError
from ..utils import logger, redact_args, time_function, trace_args

# stat() errors reported by a mount whose FUSE process has died
CORRUPTED_MOUNT_ERRNOS = (errno.ENOTCONN, errno.ESTALE, errno.EIO)

POLL_INTERVAL = 0.1

def is_mountpoint(path):
    """
    Check whether ``path`` is a mount point.

    A FUSE mount whose process has died answers stat() with ENOTCONN; it
    still occupies the mount table and counts as mounted.

    Args:
        path (str): Directory to check

    Returns:
        bool: True if something is mounted at ``path``
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        if e.errno in CORRUPTED_MOUNT_ERRNOS:
            logger.warning(f"{path} looks like a corrupted mount: {e}")
            return True
        raise

    try:
        cp = subprocess.run(["mountpoint", "-q", path])
    except FileNotFoundError:
        # util-linux not installed
        return os.path.ismount(path)
    return cp.returncode == 0

def fuse_mount(path, command, args, timeout):
    """
    Run a FUSE translation tool and wait until its mount appears.

    Args:
        path (str): Mount target the tool was given
        command (str): Executable to run
        args (list): Its arguments
        timeout (float): Seconds to wait for the mount after the tool exits

    Raises:
        InvocationError: If the tool cannot start, exits non-zero or the
            mount never appears
    """
    logger.info(f"Mounting fuse with command: {command} and args: {redact_args(args)}")
    trace_args("fuse_mount", command, args)
    start_time = time.time()

    try:
        cp = subprocess.run([command] + list(args), capture_output=True, text=True)
    except OSError as e:
        raise InvocationError(f"Cannot start {command}: {e}", command=command, args=redact_args(args)) from e

    output = (cp.stdout or "") + (cp.stderr or "")
    if cp.returncode != 0:
        logger.error(f"{command} exited with code {cp.returncode}: {output.strip()}")
        raise InvocationError(
            f"Error fuseMount command: {command} exited with code {cp.returncode}\n"
            f"args: {redact_args(args)}\noutput: {output}",
            command=command,
            args=redact_args(args),
            returncode=cp.returncode,
            output=output,
        )

    wait_for_mount(path, timeout, command=command)
    time_function("fuse_mount", start_time)

def wait_for_mount(path, timeout, command=None):
    """
    Poll until ``path`` becomes a mount point.

    Args:
        path (str): Expected mount point
        timeout (float): Seconds to wait
        command (str, optional): Tool that should have mounted it, for errors

    Raises:
        InvocationError: If the mount does not appear in time
    """
    deadline = time.monotonic() + timeout
    while True:
        if is_mountpoint(path):
            return
        if time.monotonic() >= deadline:
            raise InvocationError(f"Timeout waiting for mount at {path}", command=command, timed_out=True)
        time.sleep(POLL_INTERVAL)

def find_fuse_mount_process(path, command=None):
    """
    Find the process serving the FUSE mount at ``path``.

    Scans /proc for a process whose command line names the mount point.
    The calling process is never a match, its own argv may name the path.

    Args:
        path (str): Mount point
        command (str, optional): Only accept processes running this executable

    Returns:
        int or None: The pid, or None if no such process is found
    """
    path = path.rstrip('/')
    own_pid = str(os.getpid())
    tool = os.path.basename(command) if command else None
    try:
        entries = os.listdir("/proc")
    except OSError:
        return None

    for entry in entries:
        if not entry.isdigit() or entry == own_pid:
            continue
        try:
            with open(os.path.join("/proc", entry, "cmdline"), "rb") as f:
                cmdline = f.read().split(b"\0")
        except OSError:
            continue
        args = [arg.decode(errors="replace").rstrip('/') for arg in cmdline if arg]
        if not args or path not in args[1:]:
            continue
        if tool and os.path.basename(args[0]) != tool:
            continue
        logger.debug(f"Found fuse process {entry} for mount {path}: {args}")
        return int(entry)
    return None

def _process_alive(pid):
    try:
        with open(f"/proc/{pid}/stat") as f:
            state = f.read().rsplit(")", 1)[-1].split()[0]
    except OSError:
        return False
    # zombies have already exited
    return state != "Z"

def wait_for_process(pid, timeout):
    """
    Wait for a FUSE process to exit.

    Args:
        pid (int): Process id
        timeout (float): Seconds to wait

    Returns:
        bool: True if the process exited in time
    """
    deadline = time.monotonic() + timeout
    while _process_alive(pid):
        if time.monotonic() >= deadline:
            logger.warning(f"Fuse process {pid} still running {timeout}s after unmount")
            return False
        time.sleep(POLL_INTERVAL)
    logger.info(f"Fuse process with PID {pid} exited")
    return True

def fuse_unmount(path, timeout, command=None):
    """
    Unmount a FUSE filesystem and wait for its process to go away.

    Succeeds without doing anything if ``path`` is not mounted.

    Args:
        path (str): Mount point
        timeout (float): Seconds to wait for the FUSE process to exit
        command (str, optional): FUSE tool serving the mount

    Raises:
        CleanupError: If fusermount fails
    """
    logger.info(f"Unmounting filesystem at {path}")
    start_time = time.time()

    path = path.rstrip('/') or '/'
    if not is_mountpoint(path):
        logger.warning(f"{path} is not mounted, nothing to unmount.")
        return

    pid = find_fuse_mount_process(path, command=command)
    try:
        subprocess.run(["fusermount", "-u", path], check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        raise CleanupError(f"fusermount -u {path} failed: {(e.stderr or '').strip()}", target=path) from e
    except OSError as e:
        raise CleanupError(f"Cannot run fusermount for {path}: {e}", target=path) from e
    logger.info(f"Unmounted {path} gracefully.")

    if pid is not None:
        wait_for_process(pid, timeout)
    time_function("fuse_unmount", start_time)

def remove_dir(path):
    """
    Remove an empty directory, treating a missing one as already removed.

    Raises:
        DirectoryRemovalError: For any failure other than absence
    """
    try:
        os.rmdir(path)
    except FileNotFoundError:
        return
    except OSError as e:
        raise DirectoryRemovalError(f"Cannot remove {path}: {e}", path=path) from e
    logger.debug(f"Removed directory {path}")

def cleanup_mount_point(path):
    """
    Unmount whatever is mounted at ``path`` and remove the directory.

    A path that does not exist or is not mounted is not an error.

    Args:
        path (str): Mount point

    Raises:
        CleanupError: If umount fails
        DirectoryRemovalError: If the directory cannot be removed
    """
    if not os.path.lexists(path):
        logger.warning(f"Unmount skipped because path does not exist: {path}")
        return

    if is_mountpoint(path):
        try:
            subprocess.run(["umount", path], check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            raise CleanupError(f"umount {path} failed: {(e.stderr or '').strip()}", target=path) from e
        except OSError as e:
            raise CleanupError(f"Cannot run umount for {path}: {e}", target=path) from e
        logger.info(f"Unmounted {path}")
    else:
        logger.warning(f"{path} is not a mountpoint, deleting")

    remove_dir(path)

def bind_mount(source, target):
    """
    Expose ``source`` at ``target`` with a bind mount.

    Args:
        source (str): Existing mounted directory
        target (str): Consumer-visible path

    Raises:
        BindMountError: If the OS rejects the bind
    """
    logger.info(f"Bind mounting {source} at {target}")
    try:
        subprocess.run(["mount", "-o", "bind", source, target], check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        output = (e.stdout or "") + (e.stderr or "")
        raise BindMountError(f"Bind mount of {source} at {target} failed: {output.strip()}",
                             source=source, target=target, output=output) from e
    except OSError as e:
        raise BindMountError(f"Cannot run mount for {source}: {e}", source=source, target=target) from e
