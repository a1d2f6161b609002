# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Volume and backend configuration.

Dataclasses describing where a volume lives in the object store and how to
reach it, plus the node-wide settings read from the environment.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .exceptions import ConfigurationError

DEFAULT_CACHE_ROOT = "/var/cache/csi-s3"
DEFAULT_MOUNT_TIMEOUT = 10.0

class MounterType(Enum):
    """Translation tool used to present a bucket as a filesystem."""
    S3FS = "s3fs"

    @classmethod
    def parse(cls, value: str) -> "MounterType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(m.value for m in cls)
            raise ConfigurationError(f"Unsupported mounter {value!r} (supported: {supported})")

@dataclass(frozen=True)
class VolumeLocation:
    """Where a volume's data lives inside the object store."""
    bucket_name: str
    prefix: str = ""
    fs_path: str = ""
    extra_options: str = ""

@dataclass(frozen=True)
class BackendConfig:
    """Connection parameters for one object-store endpoint."""
    endpoint: str
    region: str = ""
    access_key_id: str = field(default="", repr=False)
    secret_access_key: str = field(default="", repr=False)

    @property
    def credentials(self) -> str:
        """Credential blob in the ``accessKeyID:secretAccessKey`` format."""
        return f"{self.access_key_id}:{self.secret_access_key}"

def _env_flag(env: Dict[str, str], name: str) -> bool:
    return env.get(name, "").lower() in ("true", "1", "yes")

@dataclass
class Settings:
    """Node-wide mounter settings."""
    home_dir: str
    cache_root: str = DEFAULT_CACHE_ROOT
    mounter: MounterType = MounterType.S3FS
    s3fs_command: str = "s3fs"
    mount_timeout: float = DEFAULT_MOUNT_TIMEOUT
    per_volume_credentials: bool = False
    strict_options: bool = False

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env (dict, optional): Mapping to read from. Defaults to os.environ.

        Returns:
            Settings: The parsed settings

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        env = os.environ if env is None else env
        # fall back to the password database when HOME is unset
        home_dir = env.get("HOME") or os.path.expanduser("~")
        if not os.path.isabs(home_dir):
            raise ConfigurationError(f"HOME must be an absolute path, got {home_dir!r}")

        raw_timeout = env.get("CSI_S3_MOUNT_TIMEOUT", str(DEFAULT_MOUNT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"CSI_S3_MOUNT_TIMEOUT must be a number, got {raw_timeout!r}")
        if timeout <= 0:
            raise ConfigurationError(f"CSI_S3_MOUNT_TIMEOUT must be positive, got {raw_timeout!r}")

        return cls(
            home_dir=home_dir,
            cache_root=env.get("CSI_S3_CACHE_ROOT", DEFAULT_CACHE_ROOT),
            mounter=MounterType.parse(env.get("CSI_S3_MOUNTER", MounterType.S3FS.value)),
            s3fs_command=env.get("CSI_S3_S3FS_CMD", "s3fs"),
            mount_timeout=timeout,
            per_volume_credentials=_env_flag(env, "CSI_S3_PER_VOLUME_CREDENTIALS"),
            strict_options=_env_flag(env, "CSI_S3_STRICT_OPTIONS"),
        )

    def cache_dir(self, bucket_name: str) -> str:
        """Deterministic per-bucket cache directory."""
        return os.path.join(self.cache_root, bucket_name)
