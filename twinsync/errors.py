"""
Error Types

Exception hierarchy for pair validation, reconciliation, file I/O and the
watch subsystem. Each fatal error carries the process exit code the CLI
uses when it aborts on it.

Author: TwinSync Project
License: MIT
"""

from pathlib import Path
from typing import Optional, Union


class TwinSyncError(Exception):
    """Base exception for all TwinSync errors"""
    exit_code = 1


class ValidationError(TwinSyncError):
    """Raised when two paths do not form an eligible sync pair"""
    exit_code = 3


class InvalidPath(ValidationError):
    """Raised when a path is missing, unusable, or has no file name"""
    pass


class NameMismatch(ValidationError):
    """Raised when the two file names differ (case-insensitive)"""

    def __init__(self, name_a: str, name_b: str):
        self.name_a = name_a
        self.name_b = name_b
        super().__init__(f"File names differ: '{name_a}' vs '{name_b}'")


class BinaryFileRejected(ValidationError):
    """Raised when either file is not UTF-8 text"""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        self.reason = reason
        message = f"Not a UTF-8 text file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnresolvedDivergence(TwinSyncError):
    """Raised when the files differ at startup and overwriting is not allowed"""
    exit_code = 4

    def __init__(self, path_a: Union[str, Path], path_b: Union[str, Path]):
        self.path_a = Path(path_a)
        self.path_b = Path(path_b)
        super().__init__(
            f"Files differ: {path_a} and {path_b}. "
            "Use --overwrite to sync them (creating backups) or fix manually."
        )


class FileIOError(TwinSyncError):
    """Raised when reading, writing, or fingerprinting a file fails"""
    exit_code = 5

    def __init__(self, operation: str, path: Union[str, Path], cause: Optional[BaseException] = None):
        self.operation = operation
        self.path = Path(path)
        self.cause = cause
        message = f"Failed to {operation} {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class WatchSubsystemError(TwinSyncError):
    """Raised when the filesystem notification stream fails"""
    exit_code = 6
