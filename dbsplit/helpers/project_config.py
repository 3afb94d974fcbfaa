"""Project configuration: project root, db folder and schema resolution.

Settings come from an optional ``dbsplit.yaml`` in the project root:

    db_folder: db
    file_separator: "-- File: "
    scan_folders:
      - constraints/foreigns
      - sources/triggers
    schema_folders:
      tables: tables_ddl
      constraints: [checks, foreigns]

Priority: environment variables > dbsplit.yaml > defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from ruamel.yaml.error import YAMLError

from dbsplit.core.folder_tree import DEFAULT_SCHEMA_FOLDERS, FolderTree, tree_paths
from dbsplit.core.markers import DEFAULT_SEPARATOR
from dbsplit.core.results import DbSplitError
from dbsplit.core.reverse_scanner import DEFAULT_SCAN_FOLDERS
from dbsplit.helpers.yaml_loader import ConfigDict, load_yaml_file

CONFIG_FILENAME = "dbsplit.yaml"
DEFAULT_DB_FOLDER = "db"

ENV_DB_FOLDER = "DBSPLIT_DB_FOLDER"
ENV_FILE_SEPARATOR = "DBSPLIT_FILE_SEPARATOR"


class ProjectConfigError(DbSplitError):
    """Invalid configuration, or a file outside the project's db folder."""


@dataclass
class ProjectConfig:
    """Resolved settings for one project.

    Attributes:
        root: Project root directory.
        db_folder: Folder below the root holding one folder per schema.
        file_separator: Separator token introducing every marker line.
        scan_folders: Folders (relative to a schema folder) searched by scan.
        schema_folders: Folder definition materialized by ``add-schema``.
        config_file: The dbsplit.yaml that was loaded, if any.
    """

    root: Path
    db_folder: str = DEFAULT_DB_FOLDER
    file_separator: str = DEFAULT_SEPARATOR
    scan_folders: list[str] = field(default_factory=lambda: list(DEFAULT_SCAN_FOLDERS))
    schema_folders: FolderTree = field(default_factory=lambda: dict(DEFAULT_SCHEMA_FOLDERS))
    config_file: Path | None = None

    @property
    def db_root(self) -> Path:
        return self.root / self.db_folder

    def schema_root(self, schema: str) -> Path:
        return self.db_root / schema

    def schema_for(self, file_path: Path) -> str:
        """Return the schema ("database user") folder owning ``file_path``.

        Raises:
            ProjectConfigError: If the file is not inside a schema folder.
        """
        db_root = self.db_root.resolve()
        resolved = Path(file_path).resolve()
        try:
            relative = resolved.relative_to(db_root)
        except ValueError:
            raise ProjectConfigError(
                f"{file_path} is not inside the db folder {db_root}",
            ) from None

        if len(relative.parts) < 2:
            raise ProjectConfigError(
                f"{file_path} is not inside a schema folder of {db_root}",
            )
        return relative.parts[0]

    def resolution_root_for(self, file_path: Path) -> Path:
        """Schema folder against which markers in ``file_path`` resolve."""
        return self.schema_root(self.schema_for(file_path))


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root by searching upward from ``start``.

    A directory holding ``dbsplit.yaml`` wins; otherwise the first directory
    containing the db folder is used.

    Note:
        As a fallback, returns the starting directory instead of raising, so
        ``add-schema`` can be run in a fresh project.
    """
    current = Path(start) if start is not None else Path.cwd()
    current = current.resolve()
    if current.is_file():
        current = current.parent

    candidates = [current, *current.parents]
    for parent in candidates:
        if (parent / CONFIG_FILENAME).is_file():
            return parent

    db_folder = os.environ.get(ENV_DB_FOLDER) or DEFAULT_DB_FOLDER
    for parent in candidates:
        if (parent / db_folder).is_dir():
            return parent

    return current


def _expect_str(data: ConfigDict, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        raise ProjectConfigError(f"'{key}' in {CONFIG_FILENAME} must be a non-empty string")
    return str(value)


def _expect_str_list(data: ConfigDict, key: str, default: list[str]) -> list[str]:
    value = data.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ProjectConfigError(f"'{key}' in {CONFIG_FILENAME} must be a list of folders")
    return [str(v) for v in cast(list[str], value)]


def _expect_folder_tree(data: ConfigDict, key: str) -> FolderTree:
    value = data.get(key)
    if value is None:
        return dict(DEFAULT_SCHEMA_FOLDERS)
    tree = cast(FolderTree, value)
    try:
        tree_paths(tree)
    except TypeError as exc:
        raise ProjectConfigError(f"'{key}' in {CONFIG_FILENAME}: {exc}") from exc
    return tree


def _read_config_file(config_path: Path) -> ConfigDict:
    try:
        raw = load_yaml_file(config_path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectConfigError(f"Could not read {config_path}: {exc}") from exc
    except YAMLError as exc:
        raise ProjectConfigError(f"{config_path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ProjectConfigError(f"{config_path} must contain a mapping")
    return cast(ConfigDict, raw)


def load_project_config(
    start: Path | None = None,
    config_path: Path | None = None,
) -> ProjectConfig:
    """Load configuration for the project containing ``start``.

    Args:
        start: File or directory inside the project (default: CWD).
        config_path: Explicit dbsplit.yaml; its directory becomes the root.

    Raises:
        ProjectConfigError: If dbsplit.yaml cannot be read, is not valid
            YAML or holds invalid values.
    """
    if config_path is not None:
        config_path = Path(config_path)
        root = config_path.resolve().parent
    else:
        root = find_project_root(start)
        candidate = root / CONFIG_FILENAME
        config_path = candidate if candidate.is_file() else None

    data: ConfigDict = {}
    if config_path is not None:
        data = _read_config_file(config_path)

    config = ProjectConfig(
        root=root,
        db_folder=_expect_str(data, "db_folder", DEFAULT_DB_FOLDER),
        file_separator=_expect_str(data, "file_separator", DEFAULT_SEPARATOR),
        scan_folders=_expect_str_list(data, "scan_folders", list(DEFAULT_SCAN_FOLDERS)),
        schema_folders=_expect_folder_tree(data, "schema_folders"),
        config_file=config_path,
    )

    if os.environ.get(ENV_DB_FOLDER):
        config.db_folder = os.environ[ENV_DB_FOLDER]
    if os.environ.get(ENV_FILE_SEPARATOR):
        config.file_separator = os.environ[ENV_FILE_SEPARATOR]

    return config


def default_config_data() -> ConfigDict:
    """Content written by ``dbsplit init`` as a starting dbsplit.yaml."""
    return {
        "db_folder": DEFAULT_DB_FOLDER,
        "file_separator": DEFAULT_SEPARATOR,
        "scan_folders": list(DEFAULT_SCAN_FOLDERS),
    }
