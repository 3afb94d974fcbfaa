"""Helper utilities: output, YAML loading and project configuration."""

from dbsplit.helpers.project_config import (
    ProjectConfig,
    ProjectConfigError,
    find_project_root,
    load_project_config,
)

__all__ = [
    "ProjectConfig",
    "ProjectConfigError",
    "find_project_root",
    "load_project_config",
]
