"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

errors.py
Exceptions that abort a whole operation.
Per-file problems are never raised; they are collected into CleanupResult.
"""


class StudySweepError(RuntimeError):
    """Base class for all fatal studysweep errors."""


class PathNotFoundError(StudySweepError):
    """Scan root (or another required directory) does not exist."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Path does not exist: {self.path}")


class UserCancelled(StudySweepError):
    """The decision provider asked to cancel the remaining batch."""

    def __init__(self, path=None):
        self.path = str(path) if path is not None else None
        message = "Operation cancelled by user"
        if self.path:
            message += f" at {self.path}"
        super().__init__(message)


class ManifestWriteError(StudySweepError):
    """Snapshot manifest could not be persisted."""

    def __init__(self, path, cause: Exception, result=None):
        self.path = str(path)
        self.cause = cause
        # CleanupResult of the batch whose moves already happened
        self.result = result
        super().__init__(f"Failed to write archive manifest {self.path}: {cause}")
