# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
s3fs backend.

Stages a bucket location with s3fs-fuse and publishes it with bind mounts.
"""

import posixpath
import time
from typing import List, Optional

from ..config import BackendConfig, Settings, VolumeLocation
from ..utils import logger, time_function
from . import Mounter
from .credentials import CredentialStore
from .mount_utils import bind_mount, cleanup_mount_point, fuse_mount, fuse_unmount, remove_dir
from .template import PlaceholderResolver, expand

class S3fsMounter(Mounter):
    """
    Mounter driving the s3fs translation tool.

    Attributes:
        meta (VolumeLocation): Bucket, prefix, path and extra options
        url (str): Endpoint URL
        region (str): Endpoint region
        settings (Settings): Node settings
        credentials (CredentialStore): Where the credential blob is written
    """

    def __init__(self, meta: VolumeLocation, cfg: BackendConfig, settings: Settings,
                 volume_id: Optional[str] = None, strict_options: Optional[bool] = None):
        self.meta = meta
        self.url = cfg.endpoint
        self.region = cfg.region
        self.settings = settings
        self._pw_file_content = cfg.credentials
        scoped_id = volume_id if settings.per_volume_credentials else None
        self.credentials = CredentialStore.for_home(settings.home_dir, scoped_id)
        self.resolver = PlaceholderResolver(
            {"cacheDir": lambda: settings.cache_dir(meta.bucket_name)},
            strict=settings.strict_options if strict_options is None else strict_options,
            context=f"bucket {meta.bucket_name}",
        )

    def source_spec(self) -> str:
        """``bucket:/prefix/fsPath`` with duplicate separators collapsed."""
        parts = [p for p in (self.meta.prefix, self.meta.fs_path) if p]
        joined = posixpath.normpath("/" + "/".join(parts))
        # normpath keeps a leading "//"
        return f"{self.meta.bucket_name}:/{joined.lstrip('/')}"

    def build_args(self, stage_target: str) -> List[str]:
        """Assemble the s3fs argument list for ``stage_target``."""
        args = [
            self.source_spec(),
            stage_target,
            "-o", "use_path_request_style",
            "-o", f"url={self.url}",
            "-o", f"endpoint={self.region}",
            "-o", "allow_other",
            "-o", "mp_umask=000",
        ]
        if self.credentials.scoped:
            args += ["-o", f"passwd_file={self.credentials.path}"]

        # parse and append extra options
        args += expand(self.meta.extra_options, self.resolver)
        return args

    def stage(self, stage_target: str) -> None:
        logger.info(f"Staging bucket {self.meta.bucket_name} at {stage_target}")
        start_time = time.time()
        self.credentials.write(self._pw_file_content)
        args = self.build_args(stage_target)
        fuse_mount(stage_target, self.settings.s3fs_command, args, self.settings.mount_timeout)
        time_function("stage", start_time)

    def unstage(self, stage_target: str) -> None:
        logger.info(f"Unstaging {stage_target}")
        fuse_unmount(stage_target, self.settings.mount_timeout, command=self.settings.s3fs_command)
        remove_dir(stage_target)
        self.credentials.remove()

    def mount(self, source: str, target: str) -> None:
        # Use bind mount to create an alias of the real mount point.
        bind_mount(source, target)

    def unmount(self, target: str) -> None:
        cleanup_mount_point(target)
