# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Credential file handling for s3fs.

s3fs reads ``accessKeyID:secretAccessKey`` from ``$HOME/.passwd-s3fs`` unless
told otherwise with ``-o passwd_file``. The global file is shared by every
volume on the node, so concurrent stages with different credentials race on
it; a per-volume store avoids that.
"""

import os
import tempfile
from typing import Optional

from ..exceptions import CredentialWriteError
from ..utils import logger, redact_credentials

PASSWD_FILE_NAME = ".passwd-s3fs"

class CredentialStore:
    """
    Writes the s3fs credential file.

    Attributes:
        path (str): Absolute path of the credential file
        scoped (bool): True when the file belongs to a single volume
    """

    def __init__(self, path: str, scoped: bool = False):
        self.path = path
        self.scoped = scoped

    @classmethod
    def for_home(cls, home_dir: str, volume_id: Optional[str] = None) -> "CredentialStore":
        """
        Build the store for a home directory.

        Args:
            home_dir (str): Directory holding the credential file, usually $HOME
            volume_id (str, optional): Scope the file to this volume

        Returns:
            CredentialStore: The store
        """
        if volume_id:
            safe_id = volume_id.replace(os.sep, "_")
            return cls(os.path.join(home_dir, f"{PASSWD_FILE_NAME}-{safe_id}"), scoped=True)
        return cls(os.path.join(home_dir, PASSWD_FILE_NAME))

    def write(self, content: str) -> None:
        """
        Replace the credential file with ``content``.

        The file is created with mode 0600 next to its final location and
        renamed over it, so s3fs never reads a partially written file.

        Args:
            content (str): ``accessKeyID:secretAccessKey``

        Raises:
            CredentialWriteError: If the directory is missing or unwritable
        """
        if not os.path.isabs(self.path):
            raise CredentialWriteError(f"Credential file path {self.path!r} is not absolute", path=self.path)
        directory = os.path.dirname(self.path)
        logger.debug(f"Writing credentials {redact_credentials(content)} to {self.path}")
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".passwd-", dir=directory)
        except OSError as e:
            raise CredentialWriteError(f"Cannot create credential file in {directory}: {e}", path=self.path) from e

        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise CredentialWriteError(f"Cannot write credential file {self.path}: {e}", path=self.path) from e

    def remove(self) -> None:
        """
        Delete a volume-scoped credential file.

        The shared global file is left alone, other volumes may still need it.

        Raises:
            CredentialWriteError: If the file exists and cannot be removed
        """
        if not self.scoped:
            return
        try:
            os.remove(self.path)
            logger.debug(f"Removed credential file {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CredentialWriteError(f"Cannot remove credential file {self.path}: {e}", path=self.path) from e
