"""Tokenize composite documents into marker-delimited segments.

A composite document is one file that embeds other files inline::

    PROMPT install orders
    -- File: tables/orders.sql
    create table orders (...);
    -- File: constraints/foreigns/fk_orders_customer.sql
    alter table orders add constraint ...;

Splitting the text on the separator token (``-- File: `` by default) yields
the preamble (segment 0, never a marker target) followed by one segment per
marker. The first line of each segment is the marker line naming the target
file; the rest of the segment is its body.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dbsplit.core.line_endings import detect_line_ending
from dbsplit.core.path_resolution import (
    has_parent_escape,
    resolve_marker_path,
    strip_parent_escape,
)
from dbsplit.core.results import ReadFailure

DEFAULT_SEPARATOR = "-- File: "


@dataclass(frozen=True)
class MarkerReference:
    """Relative target path taken from a marker line."""

    path: str

    @property
    def escaped(self) -> bool:
        return has_parent_escape(self.path)

    @property
    def bare_path(self) -> str:
        return strip_parent_escape(self.path)

    def resolve(self, resolution_root: Path) -> Path:
        return resolve_marker_path(self.path, resolution_root)


@dataclass(frozen=True)
class Segment:
    """One marker line plus the body that follows it.

    Attributes:
        index: Position in the document, starting at 1.
        raw: Text between this separator and the next one.
        eol: Line terminator of the owning document.
    """

    index: int
    raw: str
    eol: str

    @property
    def marker_line(self) -> str:
        return self.raw.split(self.eol, 1)[0]

    @property
    def body(self) -> str:
        parts = self.raw.split(self.eol, 1)
        return parts[1] if len(parts) > 1 else ""

    @property
    def has_body(self) -> bool:
        return self.body.strip() != ""

    @property
    def reference(self) -> MarkerReference:
        return MarkerReference(self.marker_line.rstrip())


@dataclass(frozen=True)
class CompositeDocument:
    """Full text of a file that may embed marker-delimited segments."""

    text: str
    separator: str = DEFAULT_SEPARATOR

    @property
    def eol(self) -> str:
        return detect_line_ending(self.text)

    @property
    def preamble(self) -> str:
        return self.text.split(self.separator, 1)[0]

    @property
    def segments(self) -> list[Segment]:
        return tokenize(self.text, self.separator)

    @property
    def has_markers(self) -> bool:
        return self.separator in self.text

    def references(self) -> list[MarkerReference]:
        return [segment.reference for segment in self.segments]


def tokenize(text: str, separator: str = DEFAULT_SEPARATOR) -> list[Segment]:
    """Split ``text`` into marker segments, preamble excluded.

    Returns an empty list when the separator never occurs; callers treat
    that as "nothing to split/join".

    Raises:
        ValueError: If the separator is empty.
    """
    if not separator:
        raise ValueError("Separator token must not be empty")

    eol = detect_line_ending(text)
    parts = text.split(separator)
    return [
        Segment(index=index, raw=raw, eol=eol)
        for index, raw in enumerate(parts[1:], start=1)
    ]


def render_document(preamble: str, segments: list[str], separator: str) -> str:
    """Rebuild a document from its preamble and raw segment texts."""
    return separator.join([preamble, *segments])


def read_document(path: Path, separator: str = DEFAULT_SEPARATOR) -> CompositeDocument:
    """Read a composite document without translating line endings."""
    return CompositeDocument(text=read_text_exact(path), separator=separator)


def write_text_exact(path: Path, text: str) -> None:
    """Write ``text`` byte for byte, without newline translation."""
    with Path(path).open("w", encoding="utf-8", newline="") as f:
        f.write(text)


def read_text_exact(path: Path) -> str:
    """Read ``path`` without newline translation.

    Raises:
        ReadFailure: If the file cannot be read or is not valid UTF-8.
    """
    try:
        with Path(path).open(encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadFailure(Path(path), exc) from exc
