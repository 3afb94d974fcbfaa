"""Split a composite document into the files its markers name.

Each segment body is written to the file named by its marker line and the
composite document is rewritten to keep only the marker lines:

    >>> doc = CompositeDocument("PRE\\n-- File: a.sql\\nbody-a\\n")
    >>> plan = split_document(doc, Path("/p/db/app"))
    >>> plan.rewritten
    'PRE\\n-- File: a.sql\\n'
    >>> plan.writes[0].content
    'body-a'

Writes are applied as one unit: if any target (or the final rewrite of the
source) cannot be written, every file already touched is restored and the
source document is left as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from dbsplit.core.markers import (
    DEFAULT_SEPARATOR,
    CompositeDocument,
    read_document,
    write_text_exact,
)
from dbsplit.core.results import (
    OperationResult,
    OperationStatus,
    ReadFailure,
    WriteFailure,
)

NOTHING_TO_SPLIT = (
    "nothing found to split! Put '{separator}relative/path/to/file.sql' "
    "above the content to be split"
)


@dataclass(frozen=True)
class PendingWrite:
    """Content waiting to be written to a resolved target."""

    path: Path
    content: str


@dataclass
class SplitPlan:
    """Everything a split would do, computed without touching the disk.

    Attributes:
        rewritten: New text of the composite document (markers only).
        writes: Target files and their content, in document order.
        skipped: Targets of segments with an empty body.
    """

    rewritten: str
    writes: list[PendingWrite] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)


def split_document(document: CompositeDocument, resolution_root: Path) -> SplitPlan:
    """Compute the split of ``document`` against ``resolution_root``.

    Segments whose body is empty or whitespace-only are skipped; their
    marker lines are still kept in the rewritten document.
    """
    segments = document.segments
    if not segments:
        return SplitPlan(rewritten=document.text)

    eol = document.eol
    separator = document.separator
    plan = SplitPlan(rewritten="")
    marker_lines: list[str] = []

    for segment in segments:
        reference = segment.reference
        marker_lines.append(reference.path)
        target = reference.resolve(resolution_root)

        if not segment.has_body:
            plan.skipped.append(target)
            continue

        plan.writes.append(PendingWrite(path=target, content=segment.body.strip()))

    plan.rewritten = (
        document.preamble
        + separator
        + (eol + separator).join(marker_lines)
        + eol
    )
    return plan


def _restore(path: Path, previous: bytes | None) -> None:
    if previous is None:
        path.unlink(missing_ok=True)
    else:
        path.write_bytes(previous)


def apply_writes(writes: list[PendingWrite]) -> list[Path]:
    """Write every pending file or none of them.

    Parent directories are created as needed. On the first failure, files
    written so far are restored to their previous content (or removed when
    they did not exist before). Snapshots are raw bytes so a target in
    any encoding can be restored.

    Returns:
        Paths written, in order.

    Raises:
        WriteFailure: For the first write that failed.
    """
    snapshots: list[tuple[Path, bytes | None]] = []

    for pending in writes:
        path = pending.path
        try:
            previous = path.read_bytes() if path.is_file() else None
            path.parent.mkdir(parents=True, exist_ok=True)
            snapshots.append((path, previous))
            write_text_exact(path, pending.content)
        except (OSError, ValueError) as exc:
            failure = WriteFailure(path, exc)
            for written, previous_content in reversed(snapshots):
                try:
                    _restore(written, previous_content)
                except OSError:
                    failure.not_restored.append(written)
            raise failure from exc

    return [path for path, _ in snapshots]


def split_file(
    path: Path,
    resolution_root: Path,
    separator: str = DEFAULT_SEPARATOR,
) -> OperationResult:
    """Split the composite file at ``path`` and rewrite it to markers only.

    Returns:
        SUCCESS with the written targets, NOOP when there is nothing to
        split, FAILURE when the source cannot be read or a write failed
        (nothing is left modified).
    """
    path = Path(path)
    try:
        document = read_document(path, separator)
    except ReadFailure as exc:
        return OperationResult.failure(str(exc))
    nothing = NOTHING_TO_SPLIT.format(separator=separator)

    if not document.has_markers:
        return OperationResult.noop(nothing)

    plan = split_document(document, resolution_root)
    if not plan.writes:
        result = OperationResult.noop(nothing)
        result.skipped = plan.skipped
        return result

    # The source rewrite is the last write of the unit so a failure on
    # any target leaves it untouched.
    batch = [*plan.writes, PendingWrite(path=path, content=plan.rewritten)]
    try:
        apply_writes(batch)
    except WriteFailure as exc:
        message = str(exc)
        if exc.not_restored:
            leftovers = ", ".join(str(p) for p in exc.not_restored)
            message += f" (could not restore: {leftovers})"
        return OperationResult.failure(message)

    count = len(plan.writes)
    return OperationResult(
        status=OperationStatus.SUCCESS,
        message=f"{path.name} successfully split into {count} file(s)",
        count=count,
        paths=[pending.path for pending in plan.writes],
        skipped=plan.skipped,
    )
