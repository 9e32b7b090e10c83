"""
Error taxonomy and exit codes shared across dvm_helper modules.
"""

from __future__ import annotations

import os


RET_CODE_SUCCESS = 0
RET_CODE_RUNTIME_ERROR = 1
RET_CODE_INVALID_OPERATION = 3
RET_CODE_INVALID_ARGUMENT = 127
RET_CODE_INTERRUPTED = 130

SYSTEM = "system"
EXPERIMENTAL = "experimental"


class DvmError(Exception):
    """
    Base exception for fatal dvm errors.

    Attributes:
        message: Human-readable error message
        detail: Underlying exception, shown in debug mode
        exit_code: Process exit code reported to the calling shell
    """
    exit_code = RET_CODE_RUNTIME_ERROR

    def __init__(self, message: str, detail: BaseException | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidArgument(DvmError):
    """A required input is missing or malformed."""
    exit_code = RET_CODE_INVALID_ARGUMENT


class InvalidOperation(DvmError):
    """The request is well formed but not allowed in the current state."""
    exit_code = RET_CODE_INVALID_OPERATION


class DvmRuntimeError(DvmError):
    """I/O, network or filesystem failure."""
    exit_code = RET_CODE_RUNTIME_ERROR


class ChecksumError(DvmRuntimeError):
    """Downloaded file does not match its published checksum."""
    pass


def is_plain_name(name: str) -> bool:
    """
    True if name is usable as a single directory entry.

    Versions and aliases become file names under the dvm directory, so
    separators and the '.' / '..' entries are rejected.
    """
    if not name or name in (".", "..") or "\0" in name:
        return False
    separators = {"/", "\\", os.sep, os.altsep}
    return not any(sep and sep in name for sep in separators)


def require_plain_name(name: str, kind: str) -> str:
    """
    Raises:
        InvalidArgument: If name is not a plain directory entry
    """
    if not is_plain_name(name):
        raise InvalidArgument(f"Invalid {kind} name: {name!r}.")
    return name
