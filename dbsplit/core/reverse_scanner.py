"""Find constraint, index and trigger files that belong to a table.

Given a table file such as ``db/app/tables/orders.sql``, scans the index,
constraint and trigger folders of the schema for files whose name contains
``orders`` and whose content declares something on that table, then appends
them to the table file as new markers. A later split/join picks them up.

This is a textual heuristic on normalized SQL, not a parser: a file matches
when, after normalization, it contains one of

- ``alter table orders add``
- `` on orders (``
- `` on orders for``
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from dbsplit.core.line_endings import detect_line_ending
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
    describe_cause,
)

DEFAULT_SCAN_FOLDERS: tuple[str, ...] = (
    "indexes/primaries",
    "indexes/uniques",
    "indexes/defaults",
    "constraints/primaries",
    "constraints/uniques",
    "constraints/foreigns",
    "constraints/checks",
    "sources/triggers",
)

_WHITESPACE_RE = re.compile(r"\s+")
_SPACES_RE = re.compile(r" {2,}")


def table_name_from_path(path: Path) -> str:
    """Table name of a table file: base name up to the first dot, lower-cased."""
    return Path(path).name.split(".")[0].lower()


def normalize_sql(text: str) -> str:
    """Collapse whitespace, lower-case and put a space before every ``(``."""
    flat = _WHITESPACE_RE.sub(" ", text).lower()
    return _SPACES_RE.sub(" ", flat.replace("(", " ("))


def references_table(content: str, table_name: str) -> bool:
    """Return True when ``content`` declares something owned by the table."""
    normalized = normalize_sql(content)
    table = table_name.lower()
    return (
        f"alter table {table} add" in normalized
        or f" on {table} (" in normalized
        or f" on {table} for" in normalized
    )


def _iter_files(folder: Path) -> Iterable[Path]:
    if not folder.is_dir():
        return []
    return sorted(p for p in folder.rglob("*") if p.is_file())


def scan(
    active_file: Path,
    resolution_root: Path,
    scan_folders: Sequence[str] = DEFAULT_SCAN_FOLDERS,
) -> list[Path]:
    """Return files under the scan folders that reference the active file's table.

    Missing scan folders are ignored. Results follow the order of
    ``scan_folders``, sorted by path within each folder. Candidates are
    decoded leniently; undecodable bytes never match a table name.

    Raises:
        ReadFailure: If a candidate file cannot be read.
    """
    table_name = table_name_from_path(active_file)
    if not table_name:
        return []

    root = Path(resolution_root)
    found: list[Path] = []
    for folder in scan_folders:
        for candidate in _iter_files(root / folder):
            if candidate in found:
                continue
            relative = candidate.relative_to(root).as_posix().lower()
            if table_name not in relative:
                continue
            try:
                content = candidate.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                raise ReadFailure(candidate, exc) from exc
            if references_table(content, table_name):
                found.append(candidate)
    return found


def append_references(
    document: CompositeDocument,
    references: Sequence[Path],
    resolution_root: Path,
) -> tuple[str, list[Path]]:
    """Append markers for ``references`` not already named in ``document``.

    Returns:
        Tuple of (new document text, references actually appended).
    """
    root = Path(resolution_root)
    known = {ref.resolve(root) for ref in document.references()}
    new_refs = [ref for ref in references if ref not in known]
    if not new_refs:
        return document.text, []

    text = document.text
    eol = detect_line_ending(text)
    if text and not text.endswith(eol):
        text += eol
    for ref in new_refs:
        text += document.separator + ref.relative_to(root).as_posix() + eol
    return text, new_refs


def scan_file(
    path: Path,
    resolution_root: Path,
    separator: str = DEFAULT_SEPARATOR,
    scan_folders: Sequence[str] = DEFAULT_SCAN_FOLDERS,
) -> OperationResult:
    """Scan for files belonging to the table at ``path`` and append markers.

    Returns:
        SUCCESS with the appended references, NOOP when nothing new was
        found, FAILURE when a file cannot be read or written.
    """
    path = Path(path)
    table_name = table_name_from_path(path)
    try:
        references = scan(path, resolution_root, scan_folders)
        document = read_document(path, separator)
    except ReadFailure as exc:
        return OperationResult.failure(str(exc))

    text, appended = append_references(document, references, resolution_root)
    if not appended:
        return OperationResult.noop(
            f"nothing found ... files have to include the table name '{table_name}'",
        )

    try:
        write_text_exact(path, text)
    except OSError as exc:
        return OperationResult.failure(f"Could not write {path}: {describe_cause(exc)}")

    count = len(appended)
    return OperationResult(
        status=OperationStatus.SUCCESS,
        message=f"{count} referencing file(s) appended to {path.name}",
        count=count,
        paths=appended,
    )
