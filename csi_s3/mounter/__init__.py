# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Volume mounters.

A mounter makes a location inside a bucket appear as a directory on the
node. ``stage`` establishes the primary mount at a staging path through a
FUSE translation tool, ``mount`` exposes it at a consumer path with a bind
mount, and ``unmount``/``unstage`` undo those steps.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..config import BackendConfig, MounterType, Settings, VolumeLocation
from ..exceptions import ConfigurationError

class Mounter(ABC):
    """Contract shared by every translation tool backend."""

    @abstractmethod
    def stage(self, stage_target: str) -> None:
        """Mount the volume's bucket location at ``stage_target``."""

    @abstractmethod
    def unstage(self, stage_target: str) -> None:
        """Unmount ``stage_target`` and remove the directory."""

    @abstractmethod
    def mount(self, source: str, target: str) -> None:
        """Expose the staged ``source`` at ``target``."""

    @abstractmethod
    def unmount(self, target: str) -> None:
        """Release the consumer path ``target``."""

def new_mounter(meta: VolumeLocation, cfg: BackendConfig, settings: Optional[Settings] = None,
                volume_id: Optional[str] = None) -> Mounter:
    """
    Create the mounter configured for this node.

    Args:
        meta (VolumeLocation): Where the volume lives in the bucket
        cfg (BackendConfig): Endpoint and credentials
        settings (Settings, optional): Node settings. Defaults to Settings.from_env()
        volume_id (str, optional): Volume identifier, used to scope credentials

    Returns:
        Mounter: A backend instance for one mount cycle

    Raises:
        ConfigurationError: If the configured backend is not available
    """
    settings = settings or Settings.from_env()
    if settings.mounter == MounterType.S3FS:
        from .s3fs import S3fsMounter
        return S3fsMounter(meta, cfg, settings, volume_id=volume_id)
    raise ConfigurationError(f"Mounter {settings.mounter.value!r} is not available")

__all__ = ["Mounter", "new_mounter"]
