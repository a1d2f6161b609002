# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Mounter exceptions.

Every error carries a short code and maps onto a gRPC status so the node
server driving the mounter can return it unchanged.
"""
from typing import List, Optional
import grpc

class MounterError(Exception):
    """Base exception for mounter errors."""
    grpc_status = grpc.StatusCode.INTERNAL

    def __init__(self, message: str, code: str = "ERR_UNKNOWN"):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")

class ConfigurationError(MounterError):
    """Configuration or settings error."""
    grpc_status = grpc.StatusCode.INVALID_ARGUMENT

    def __init__(self, message: str):
        super().__init__(message, code="ERR_CONFIG")

class CredentialWriteError(MounterError):
    """Persisting the credential file failed."""
    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message, code="ERR_CREDENTIALS")

class InvocationError(MounterError):
    """The external mount tool failed to start, exited non-zero or never mounted."""
    def __init__(self, message: str, command: str = None, args: Optional[List[str]] = None,
                 returncode: Optional[int] = None, output: str = "", timed_out: bool = False):
        self.command = command
        self.args_ = args or []
        self.returncode = returncode
        self.output = output
        self.timed_out = timed_out
        super().__init__(message, code="ERR_INVOCATION")

    @property
    def grpc_status(self):
        if self.timed_out:
            return grpc.StatusCode.DEADLINE_EXCEEDED
        return grpc.StatusCode.INTERNAL

class BindMountError(MounterError):
    """The OS rejected a bind mount."""
    def __init__(self, message: str, source: str = None, target: str = None, output: str = ""):
        self.source = source
        self.target = target
        self.output = output
        super().__init__(message, code="ERR_BIND_MOUNT")

class CleanupError(MounterError):
    """Mount point teardown failed for a reason other than "not mounted"."""
    def __init__(self, message: str, target: str = None):
        self.target = target
        super().__init__(message, code="ERR_CLEANUP")

class DirectoryRemovalError(MounterError):
    """Removing a directory after unmount failed for a reason other than absence."""
    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message, code="ERR_REMOVE_DIR")

class UnknownPlaceholderError(MounterError):
    """An option template referenced a placeholder with no resolver (strict mode)."""
    grpc_status = grpc.StatusCode.INVALID_ARGUMENT

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown extra option placeholder {name!r}", code="ERR_PLACEHOLDER")

class InvalidStateError(MounterError):
    """A lifecycle operation was called out of order."""
    grpc_status = grpc.StatusCode.FAILED_PRECONDITION

    def __init__(self, message: str, state=None, operation: str = None):
        self.state = state
        self.operation = operation
        super().__init__(message, code="ERR_STATE")

def to_grpc_status(exc: Exception) -> grpc.StatusCode:
    """
    Map an exception raised by a mounter operation to a gRPC status code.

    Args:
        exc (Exception): The error to convert.

    Returns:
        grpc.StatusCode: The status the node server should report.
    """
    if isinstance(exc, MounterError):
        return exc.grpc_status
    return grpc.StatusCode.UNKNOWN
