"""Join referenced files back into a composite document.

The inverse of :mod:`dbsplit.core.split_engine`: every marker whose target
exists gets the target's current content inlined below it, followed by a
blank line. Bodies are replaced, not appended, so joining twice gives the
same document. Target files are never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from dbsplit.core.markers import (
    DEFAULT_SEPARATOR,
    CompositeDocument,
    Segment,
    read_document,
    read_text_exact,
    render_document,
    write_text_exact,
)
from dbsplit.core.results import (
    OperationResult,
    OperationStatus,
    ReadFailure,
    describe_cause,
)

NOTHING_TO_JOIN = (
    "nothing found to join! Use '{separator}relative/path/to/file.sql' "
    "to refer to files which should be joined"
)


@dataclass
class JoinOutcome:
    """Expanded document plus what was joined.

    Attributes:
        expanded: New text of the composite document.
        joined: Targets whose content was inlined, in document order.
        unresolved: Targets that do not exist (segments left unchanged).
    """

    expanded: str
    joined: list[Path] = field(default_factory=list)
    unresolved: list[Path] = field(default_factory=list)

    @property
    def joined_count(self) -> int:
        return len(self.joined)


def _inline(segment: Segment, content: str) -> str:
    eol = segment.eol
    marker = segment.marker_line.rstrip()
    body = content.rstrip()
    if not body:
        return marker + eol
    return marker + eol + body + eol + eol


def join_document(document: CompositeDocument, resolution_root: Path) -> JoinOutcome:
    """Inline every resolvable marker target of ``document``.

    Segments whose target is missing are kept byte for byte.

    Raises:
        ReadFailure: If an existing target cannot be read.
    """
    segments = document.segments
    outcome = JoinOutcome(expanded=document.text)
    if not segments:
        return outcome

    rendered: list[str] = []
    for segment in segments:
        target = segment.reference.resolve(resolution_root)
        if not target.is_file():
            outcome.unresolved.append(target)
            rendered.append(segment.raw)
            continue

        rendered.append(_inline(segment, read_text_exact(target)))
        outcome.joined.append(target)

    if outcome.joined:
        outcome.expanded = render_document(
            document.preamble, rendered, document.separator,
        )
    return outcome


def join_file(
    path: Path,
    resolution_root: Path,
    separator: str = DEFAULT_SEPARATOR,
) -> OperationResult:
    """Join the targets referenced by the composite file at ``path``.

    Returns:
        SUCCESS with the joined targets, NOOP when no marker resolved to
        an existing file, FAILURE when the document or a target cannot be
        read or the document cannot be written. The document is left
        unchanged unless the result is SUCCESS.
    """
    path = Path(path)
    try:
        document = read_document(path, separator)
        outcome = join_document(document, resolution_root)
    except ReadFailure as exc:
        return OperationResult.failure(str(exc))

    if not outcome.joined:
        result = OperationResult.noop(NOTHING_TO_JOIN.format(separator=separator))
        result.skipped = outcome.unresolved
        return result

    try:
        write_text_exact(path, outcome.expanded)
    except OSError as exc:
        return OperationResult.failure(f"Could not write {path}: {describe_cause(exc)}")

    count = outcome.joined_count
    return OperationResult(
        status=OperationStatus.SUCCESS,
        message=f"{count} file(s) successfully joined into {path.name}",
        count=count,
        paths=outcome.joined,
        skipped=outcome.unresolved,
    )
