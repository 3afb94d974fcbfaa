"""Tests for the marker tokenizer and composite document model."""

from pathlib import Path

import pytest

from dbsplit.core.markers import (
    DEFAULT_SEPARATOR,
    CompositeDocument,
    MarkerReference,
    read_document,
    render_document,
    tokenize,
    write_text_exact,
)

_SCENARIO = "PRE\n-- File: a.sql\nbody-a\n-- File: b.sql\nbody-b\n"


class TestTokenize:
    """Splitting composite text on the separator token."""

    def test_segments_after_preamble(self) -> None:
        segments = tokenize(_SCENARIO)

        assert [s.index for s in segments] == [1, 2]
        assert [s.marker_line for s in segments] == ["a.sql", "b.sql"]
        assert [s.body for s in segments] == ["body-a\n", "body-b\n"]

    def test_no_separator_yields_no_segments(self) -> None:
        assert tokenize("create table t (id number);\n") == []

    def test_marker_at_end_without_terminator(self) -> None:
        segments = tokenize("PRE\n-- File: last.sql")

        assert segments[0].marker_line == "last.sql"
        assert segments[0].body == ""
        assert not segments[0].has_body

    def test_whitespace_only_body_is_empty(self) -> None:
        segment = tokenize("-- File: a.sql\n  \n\t\n")[0]

        assert not segment.has_body

    def test_crlf_segments_split_on_crlf(self) -> None:
        segment = tokenize("PRE\r\n-- File: a.sql\r\nl1\r\nl2\r\n")[0]

        assert segment.eol == "\r\n"
        assert segment.marker_line == "a.sql"
        assert segment.body == "l1\r\nl2\r\n"

    def test_custom_separator(self) -> None:
        segments = tokenize("x\n--@ a.sql\nbody\n", separator="--@ ")

        assert segments[0].reference.path == "a.sql"

    def test_empty_separator_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            tokenize("text", separator="")


class TestMarkerReference:

    def test_trailing_whitespace_is_not_part_of_path(self) -> None:
        segment = tokenize("-- File: a.sql  \nbody\n")[0]

        assert segment.reference == MarkerReference("a.sql")

    def test_escaped_reference(self) -> None:
        ref = MarkerReference("../shared/x.sql")

        assert ref.escaped
        assert ref.bare_path == "shared/x.sql"
        assert ref.resolve(Path("/p/db/app")) == Path("/p/db/shared/x.sql")


class TestCompositeDocument:

    def test_preamble_and_references(self) -> None:
        doc = CompositeDocument(_SCENARIO)

        assert doc.preamble == "PRE\n"
        assert doc.has_markers
        assert [r.path for r in doc.references()] == ["a.sql", "b.sql"]

    def test_render_restores_text(self) -> None:
        doc = CompositeDocument(_SCENARIO)
        raw = [s.raw for s in doc.segments]

        assert render_document(doc.preamble, raw, DEFAULT_SEPARATOR) == _SCENARIO

    def test_read_document_keeps_crlf(self, tmp_path: Path) -> None:
        path = tmp_path / "install.sql"
        path.write_bytes(b"PRE\r\n-- File: a.sql\r\n")

        doc = read_document(path)

        assert doc.text == "PRE\r\n-- File: a.sql\r\n"
        assert doc.eol == "\r\n"

    def test_write_text_exact_does_not_translate(self, tmp_path: Path) -> None:
        path = tmp_path / "out.sql"

        write_text_exact(path, "a\r\nb\n")

        assert path.read_bytes() == b"a\r\nb\n"
