# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
CSI S3 mounter.

Makes a location inside an object-store bucket appear as a POSIX directory
on a node through a FUSE translation tool, and exposes it to consumers with
bind mounts.
"""

from .config import BackendConfig, MounterType, Settings, VolumeLocation
from .exceptions import (
    BindMountError,
    CleanupError,
    ConfigurationError,
    CredentialWriteError,
    DirectoryRemovalError,
    InvalidStateError,
    InvocationError,
    MounterError,
    UnknownPlaceholderError,
    to_grpc_status,
)
from .lifecycle import VolumeLifecycle, VolumeState
from .mounter import Mounter, new_mounter

__version__ = "0.1.0"

__all__ = [
    "BackendConfig",
    "BindMountError",
    "CleanupError",
    "ConfigurationError",
    "CredentialWriteError",
    "DirectoryRemovalError",
    "InvalidStateError",
    "InvocationError",
    "Mounter",
    "MounterError",
    "MounterType",
    "Settings",
    "UnknownPlaceholderError",
    "VolumeLifecycle",
    "VolumeLocation",
    "VolumeState",
    "new_mounter",
    "to_grpc_status",
]
