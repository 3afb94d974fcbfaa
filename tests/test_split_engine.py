"""Tests for the split engine.

Covers:
- Scenario: two segments split into two files, source keeps only markers
- Empty and whitespace-only bodies are skipped but keep their marker
- Documents without markers are left byte-identical
- CRLF documents produce CRLF files and a CRLF source
- Parent-escaped markers and nested target folders
- Write failures roll back every file already written, in any encoding
- Duplicate markers naming one target, unreadable sources
"""

from pathlib import Path

import pytest

from dbsplit.core.markers import CompositeDocument
from dbsplit.core.results import OperationStatus, WriteFailure
from dbsplit.core.split_engine import PendingWrite, apply_writes, split_document, split_file

_SCENARIO_A = b"PRE\n-- File: a.sql\nbody-a\n-- File: b.sql\nbody-b\n"


def _install(schema_root: Path, content: bytes) -> Path:
    path = schema_root / "install.sql"
    path.write_bytes(content)
    return path


class TestSplitDocument:
    """Planning a split without touching the disk."""

    def test_plan_for_two_segments(self) -> None:
        root = Path("/p/db/app")
        doc = CompositeDocument(_SCENARIO_A.decode())

        plan = split_document(doc, root)

        assert plan.rewritten == "PRE\n-- File: a.sql\n-- File: b.sql\n"
        assert plan.writes == [
            PendingWrite(root / "a.sql", "body-a"),
            PendingWrite(root / "b.sql", "body-b"),
        ]
        assert plan.skipped == []

    def test_plan_without_markers_keeps_text(self) -> None:
        doc = CompositeDocument("select 1 from dual;\n")

        plan = split_document(doc, Path("/r"))

        assert plan.rewritten == doc.text
        assert plan.writes == []

    def test_body_is_trimmed(self) -> None:
        doc = CompositeDocument("-- File: a.sql\n\n\n  create table a;\n\n\n")

        plan = split_document(doc, Path("/r"))

        assert plan.writes[0].content == "create table a;"


class TestSplitFile:
    """End-to-end split against a temporary schema folder."""

    def test_scenario_two_segments(self, schema_root: Path) -> None:
        source = _install(schema_root, _SCENARIO_A)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.SUCCESS
        assert result.count == 2
        assert result.paths == [schema_root / "a.sql", schema_root / "b.sql"]
        assert (schema_root / "a.sql").read_bytes() == b"body-a"
        assert (schema_root / "b.sql").read_bytes() == b"body-b"
        assert source.read_bytes() == b"PRE\n-- File: a.sql\n-- File: b.sql\n"

    def test_empty_body_is_skipped_but_marker_kept(self, schema_root: Path) -> None:
        source = _install(schema_root, b"PRE\n-- File: a.sql\n-- File: b.sql\nbody-b\n")

        result = split_file(source, schema_root)

        assert result.count == 1
        assert result.skipped == [schema_root / "a.sql"]
        assert not (schema_root / "a.sql").exists()
        assert source.read_bytes() == b"PRE\n-- File: a.sql\n-- File: b.sql\n"

    def test_whitespace_only_bodies_are_a_noop(self, schema_root: Path) -> None:
        content = b"PRE\n-- File: a.sql\n   \n\t\n-- File: b.sql\n"
        source = _install(schema_root, content)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.NOOP
        assert "nothing found to split" in result.message
        assert source.read_bytes() == content
        assert not (schema_root / "a.sql").exists()

    def test_no_markers_is_a_noop(self, schema_root: Path) -> None:
        content = b"create table orders (id number);\n"
        source = _install(schema_root, content)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.NOOP
        assert result.ok
        assert source.read_bytes() == content

    def test_crlf_is_preserved(self, schema_root: Path) -> None:
        source = _install(
            schema_root,
            b"PRE\r\n-- File: a.sql\r\nline1\r\nline2\r\n-- File: b.sql\r\nbody-b\r\n",
        )

        split_file(source, schema_root)

        assert (schema_root / "a.sql").read_bytes() == b"line1\r\nline2"
        assert (schema_root / "b.sql").read_bytes() == b"body-b"
        assert source.read_bytes() == b"PRE\r\n-- File: a.sql\r\n-- File: b.sql\r\n"

    def test_lf_is_preserved(self, schema_root: Path) -> None:
        source = _install(schema_root, b"-- File: a.sql\nline1\nline2\n")

        split_file(source, schema_root)

        assert (schema_root / "a.sql").read_bytes() == b"line1\nline2"

    def test_creates_nested_folders(self, schema_root: Path) -> None:
        source = _install(schema_root, b"-- File: tables/tables_ddl/orders.1.sql\nalter table orders;\n")

        split_file(source, schema_root)

        target = schema_root / "tables" / "tables_ddl" / "orders.1.sql"
        assert target.read_bytes() == b"alter table orders;"

    def test_parent_escape_writes_one_level_up(self, schema_root: Path) -> None:
        source = _install(schema_root, b"-- File: ../shared/grants.sql\ngrant select;\n")

        split_file(source, schema_root)

        assert (schema_root.parent / "shared" / "grants.sql").read_bytes() == b"grant select;"
        assert not (schema_root / "shared").exists()
        assert source.read_bytes() == b"-- File: ../shared/grants.sql\n"

    def test_overwrites_existing_target(self, schema_root: Path) -> None:
        (schema_root / "a.sql").write_bytes(b"old content")
        source = _install(schema_root, b"-- File: a.sql\nnew content\n")

        split_file(source, schema_root)

        assert (schema_root / "a.sql").read_bytes() == b"new content"

    def test_split_is_stable_on_marker_only_document(self, schema_root: Path) -> None:
        source = _install(schema_root, _SCENARIO_A)
        split_file(source, schema_root)
        after_first = source.read_bytes()

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.NOOP
        assert source.read_bytes() == after_first


class TestSplitWriteFailure:
    """A failing target write leaves nothing modified."""

    def test_rolls_back_and_keeps_source(self, schema_root: Path) -> None:
        (schema_root / "a.sql").write_bytes(b"old-a")
        (schema_root / "blocker").write_bytes(b"a file, not a folder")
        content = (
            b"PRE\n"
            b"-- File: a.sql\nnew-a\n"
            b"-- File: fresh.sql\nfresh\n"
            b"-- File: blocker/b.sql\nbody-b\n"
        )
        source = _install(schema_root, content)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.FAILURE
        assert not result.ok
        assert "blocker" in result.message
        assert (schema_root / "a.sql").read_bytes() == b"old-a"
        assert not (schema_root / "fresh.sql").exists()
        assert source.read_bytes() == content

    def test_apply_writes_returns_written_paths(self, tmp_path: Path) -> None:
        writes = [
            PendingWrite(tmp_path / "x" / "one.sql", "1"),
            PendingWrite(tmp_path / "two.sql", "2"),
        ]

        written = apply_writes(writes)

        assert written == [tmp_path / "x" / "one.sql", tmp_path / "two.sql"]
        assert (tmp_path / "x" / "one.sql").read_text() == "1"

    def test_non_utf8_target_is_restored_byte_for_byte(self, schema_root: Path) -> None:
        (schema_root / "legacy.sql").write_bytes(b"caf\xe9 latin-1")
        (schema_root / "blocker").write_bytes(b"")
        content = (
            b"-- File: legacy.sql\nnew-legacy\n"
            b"-- File: blocker/b.sql\nbody-b\n"
        )
        source = _install(schema_root, content)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.FAILURE
        assert (schema_root / "legacy.sql").read_bytes() == b"caf\xe9 latin-1"
        assert source.read_bytes() == content

    def test_non_utf8_target_does_not_abort_split(self, schema_root: Path) -> None:
        (schema_root / "a.sql").write_bytes(b"old-a")
        (schema_root / "b.sql").write_bytes(b"caf\xe9 latin-1")
        source = _install(schema_root, b"-- File: a.sql\nnew-a\n-- File: b.sql\nnew-b\n")

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.SUCCESS
        assert (schema_root / "a.sql").read_bytes() == b"new-a"
        assert (schema_root / "b.sql").read_bytes() == b"new-b"

    def test_duplicate_markers_roll_back_to_first_snapshot(self, schema_root: Path) -> None:
        (schema_root / "a.sql").write_bytes(b"old-a")
        (schema_root / "blocker").write_bytes(b"")
        content = (
            b"-- File: a.sql\nfirst\n"
            b"-- File: a.sql\nsecond\n"
            b"-- File: blocker/b.sql\nbody-b\n"
        )
        source = _install(schema_root, content)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.FAILURE
        assert (schema_root / "a.sql").read_bytes() == b"old-a"
        assert source.read_bytes() == content

    def test_duplicate_markers_last_body_wins(self, schema_root: Path) -> None:
        source = _install(schema_root, b"-- File: a.sql\nfirst\n-- File: a.sql\nsecond\n")

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.SUCCESS
        assert (schema_root / "a.sql").read_bytes() == b"second"
        assert source.read_bytes() == b"-- File: a.sql\n-- File: a.sql\n"

    def test_non_utf8_source_is_a_failure(self, schema_root: Path) -> None:
        content = b"-- File: a.sql\ncaf\xe9\n"
        source = _install(schema_root, content)

        result = split_file(source, schema_root)

        assert result.status == OperationStatus.FAILURE
        assert result.message.startswith(f"Could not read {source}")
        assert "0xe9" in result.message
        assert not (schema_root / "a.sql").exists()
        assert source.read_bytes() == content

    def test_apply_writes_raises_write_failure(self, tmp_path: Path) -> None:
        (tmp_path / "blocker").write_bytes(b"")
        writes = [
            PendingWrite(tmp_path / "one.sql", "1"),
            PendingWrite(tmp_path / "blocker" / "two.sql", "2"),
        ]

        with pytest.raises(WriteFailure) as excinfo:
            apply_writes(writes)

        assert excinfo.value.path == tmp_path / "blocker" / "two.sql"
        assert excinfo.value.not_restored == []
        assert not (tmp_path / "one.sql").exists()
