"""Shared fixtures for the dbsplit test suite.

Every test gets an isolated project directory laid out the way dbFlow
projects are::

    <tmp>/
        dbsplit.yaml
        db/
            app/        <- schema folder, default resolution root
"""

from __future__ import annotations

from pathlib import Path

import pytest

from dbsplit.helpers.project_config import ENV_DB_FOLDER, ENV_FILE_SEPARATOR


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment overrides out of the tests."""
    monkeypatch.delenv(ENV_DB_FOLDER, raising=False)
    monkeypatch.delenv(ENV_FILE_SEPARATOR, raising=False)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """Project root with a dbsplit.yaml and an empty ``db/app`` schema folder."""
    (tmp_path / "dbsplit.yaml").write_text("db_folder: db\n", encoding="utf-8")
    (tmp_path / "db" / "app").mkdir(parents=True)
    return tmp_path


@pytest.fixture()
def schema_root(project: Path) -> Path:
    """Resolution root of the ``app`` schema."""
    return project / "db" / "app"
