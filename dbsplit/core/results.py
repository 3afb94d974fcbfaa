"""Outcome types and errors shared by the split, join and scan engines.

Every engine entry point that works on a file returns an
:class:`OperationResult`. Expected outcomes such as "nothing found to split"
are results, not exceptions; only genuine failures raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DbSplitError(Exception):
    """Base class for all dbsplit failures."""


def describe_cause(cause: Exception) -> str:
    """Short reason for an I/O or decoding error."""
    if isinstance(cause, UnicodeDecodeError):
        byte = cause.object[cause.start]
        return f"not valid {cause.encoding} (byte 0x{byte:02x} at offset {cause.start})"
    if isinstance(cause, OSError) and cause.strerror:
        return cause.strerror
    return str(cause)


class ReadFailure(DbSplitError):
    """A composite document or marker target could not be read."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read {path}: {describe_cause(cause)}")


class WriteFailure(DbSplitError):
    """Writing a split target failed; earlier writes were rolled back."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        self.not_restored: list[Path] = []
        super().__init__(f"Could not write {path}: {describe_cause(cause)}")


class OperationStatus(Enum):
    """Tri-state outcome of a split, join or scan."""

    SUCCESS = "success"
    NOOP = "noop"
    FAILURE = "failure"


@dataclass
class OperationResult:
    """Result of one split, join or scan invocation.

    Attributes:
        status: Outcome of the operation.
        message: Human readable summary.
        count: Number of files written, joined or discovered.
        paths: Files written, read or discovered, in document order.
        skipped: Marker targets that were skipped (empty body, missing file).
    """

    status: OperationStatus
    message: str
    count: int = 0
    paths: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True unless the operation failed."""
        return self.status != OperationStatus.FAILURE

    @classmethod
    def noop(cls, message: str) -> OperationResult:
        return cls(status=OperationStatus.NOOP, message=message)

    @classmethod
    def failure(cls, message: str) -> OperationResult:
        return cls(status=OperationStatus.FAILURE, message=message)
