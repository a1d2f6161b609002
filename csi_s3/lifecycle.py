# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Volume lifecycle tracking.

Wraps a Mounter and rejects calls made out of order: a volume must be
staged before it is published, and every published path must be released
before the volume is unstaged.
"""

from enum import Enum
from threading import Lock
from typing import Set

from .exceptions import InvalidStateError
from .mounter import Mounter
from .utils import logger

class VolumeState(Enum):
    UNSTAGED = "unstaged"
    STAGED = "staged"
    MOUNTED = "mounted"

class VolumeLifecycle:
    """
    State machine around one volume's mounter.

    Attributes:
        mounter (Mounter): Backend performing the operations
        state (VolumeState): Current state
        targets (set): Consumer paths currently bind mounted
    """

    def __init__(self, mounter: Mounter):
        self.mounter = mounter
        self.state = VolumeState.UNSTAGED
        self.stage_target = None
        self.targets: Set[str] = set()
        self._lock = Lock()

    def _reject(self, operation: str, reason: str):
        logger.error(f"Rejected {operation} in state {self.state.value}: {reason}")
        raise InvalidStateError(f"Cannot {operation} volume in state {self.state.value}: {reason}",
                                state=self.state, operation=operation)

    def stage(self, stage_target: str) -> None:
        with self._lock:
            if self.state != VolumeState.UNSTAGED:
                self._reject("stage", f"already staged at {self.stage_target}")
            self.mounter.stage(stage_target)
            self.stage_target = stage_target
            self.state = VolumeState.STAGED

    def mount(self, source: str, target: str) -> None:
        with self._lock:
            if self.state == VolumeState.UNSTAGED:
                self._reject("mount", "volume is not staged")
            if self.stage_target is not None and source.rstrip("/") != self.stage_target.rstrip("/"):
                logger.warning(f"Publishing {target} from {source}, volume is staged at {self.stage_target}")
            if target in self.targets:
                logger.info(f"{target} is already published")
                return
            self.mounter.mount(source, target)
            self.targets.add(target)
            self.state = VolumeState.MOUNTED

    def unmount(self, target: str) -> None:
        """Release ``target``. Unknown targets are still cleaned up."""
        with self._lock:
            self.mounter.unmount(target)
            self.targets.discard(target)
            if self.state == VolumeState.MOUNTED and not self.targets:
                self.state = VolumeState.STAGED

    def unstage(self, stage_target: str) -> None:
        with self._lock:
            if self.targets:
                self._reject("unstage", f"still published at {sorted(self.targets)}")
            self.mounter.unstage(stage_target)
            self.stage_target = None
            self.state = VolumeState.UNSTAGED
