#!/usr/bin/env python3
"""dbsplit CLI - Main Entry Point.

Usage:
    dbsplit <command> [options]

Commands:
    split <file>         Split a composite file into the files its markers name
    join <file>          Join the files named by markers back into the file
    scan <file>          Append markers for constraint/index/trigger files of a table
    add-schema <name>    Create the folder structure of a schema below the db folder
    init                 Write a starting dbsplit.yaml to the project root
    help                 Show this help message
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import click

from dbsplit.core.folder_tree import materialize_tree
from dbsplit.core.join_engine import join_file
from dbsplit.core.results import DbSplitError, OperationResult, OperationStatus
from dbsplit.core.reverse_scanner import scan_file
from dbsplit.core.split_engine import split_file
from dbsplit.helpers.helpers_logging import (
    print_dim,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)
from dbsplit.helpers.project_config import (
    CONFIG_FILENAME,
    ProjectConfig,
    default_config_data,
    find_project_root,
    load_project_config,
)
from dbsplit.helpers.yaml_loader import save_yaml_file

# Minimum number of CLI args (program name + command)
_MIN_ARGS = 2

COMMANDS: dict[str, str] = {
    "split": "Split a composite file into the files its markers name",
    "join": "Join the files named by markers back into the composite file",
    "scan": "Append markers for constraint/index/trigger files of a table file",
    "add-schema": "Create the folder structure of a schema below the db folder",
    "init": f"Write a starting {CONFIG_FILENAME} to the project root",
}

_FILE_ARG = click.Path(exists=True, dir_okay=False, path_type=Path)


def print_help() -> None:
    """Print help message with all available commands."""
    print(__doc__)
    root = find_project_root()
    print(f"📍 Project root: {root}")
    print("\n📦 Commands:")
    for cmd, description in COMMANDS.items():
        print(f"  {cmd:20} - {description}")


def _display_path(path: Path, base: Path) -> str:
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return str(path)


def report_result(result: OperationResult, base: Path) -> int:
    """Print an operation result and return the matching exit code."""
    if result.status == OperationStatus.FAILURE:
        print_error(result.message)
        return 1

    if result.status == OperationStatus.NOOP:
        print_warning(result.message)
        return 0

    print_success(result.message)
    for path in result.paths:
        print_dim(f"  → {_display_path(path, base)}")
    for path in result.skipped:
        print_dim(f"  - skipped {_display_path(path, base)}")
    return 0


def _run_on_file(
    file_path: Path,
    root_option: Path | None,
    separator_option: str | None,
    operation: Callable[[ProjectConfig, Path, Path, str], OperationResult],
) -> int:
    """Resolve configuration for ``file_path`` and run ``operation`` on it."""
    try:
        config = load_project_config(start=file_path)
        resolution_root = (
            root_option if root_option is not None
            else config.resolution_root_for(file_path)
        )
        separator = separator_option or config.file_separator
        result = operation(config, file_path, resolution_root, separator)
    except DbSplitError as exc:
        print_error(str(exc))
        return 1

    return report_result(result, resolution_root)


def _split(_config: ProjectConfig, path: Path, root: Path, separator: str) -> OperationResult:
    return split_file(path, root, separator)


def _join(_config: ProjectConfig, path: Path, root: Path, separator: str) -> OperationResult:
    return join_file(path, root, separator)


def _scan(config: ProjectConfig, path: Path, root: Path, separator: str) -> OperationResult:
    return scan_file(path, root, separator, config.scan_folders)


@click.group(invoke_without_command=True)
@click.pass_context
def _click_cli(ctx: click.Context) -> int:
    """Top-level dbsplit command group."""
    if ctx.invoked_subcommand is not None:
        return 0
    print_help()
    return 0


_root_option = click.option(
    "--root", "-r", "root_option",
    type=click.Path(file_okay=False, path_type=Path),
    help="Resolution root (default: the schema folder owning FILE)",
)
_separator_option = click.option(
    "--separator", "separator_option",
    help="Separator token (default: file_separator from dbsplit.yaml)",
)


@_click_cli.command(name="split", help=COMMANDS["split"])
@click.argument("file_path", type=_FILE_ARG)
@_root_option
@_separator_option
def split_cmd(file_path: Path, root_option: Path | None, separator_option: str | None) -> int:
    """Split FILE by its markers."""
    return _run_on_file(file_path, root_option, separator_option, _split)


@_click_cli.command(name="join", help=COMMANDS["join"])
@click.argument("file_path", type=_FILE_ARG)
@_root_option
@_separator_option
def join_cmd(file_path: Path, root_option: Path | None, separator_option: str | None) -> int:
    """Join the marker targets of FILE back into it."""
    return _run_on_file(file_path, root_option, separator_option, _join)


@_click_cli.command(name="scan", help=COMMANDS["scan"])
@click.argument("file_path", type=_FILE_ARG)
@_root_option
@_separator_option
def scan_cmd(file_path: Path, root_option: Path | None, separator_option: str | None) -> int:
    """Append references to files belonging to the table in FILE."""
    return _run_on_file(file_path, root_option, separator_option, _scan)


@_click_cli.command(name="add-schema", help=COMMANDS["add-schema"])
@click.argument("schema")
def add_schema_cmd(schema: str) -> int:
    """Create db/<schema> with the configured folder structure."""
    try:
        config = load_project_config()
    except DbSplitError as exc:
        print_error(str(exc))
        return 1

    schema_root = config.schema_root(schema)
    print_header(f"Schema folder: {schema_root}")
    created = materialize_tree(config.schema_folders, schema_root)
    if not created:
        print_warning(f"Schema {schema} already has all folders, nothing created")
        return 0

    for folder in created:
        print_dim(f"  + {_display_path(folder, config.root)}")
    print_success(f"Schema {schema} created with {len(created)} folder(s)")
    return 0


@_click_cli.command(name="init", help=COMMANDS["init"])
def init_cmd() -> int:
    """Write a default dbsplit.yaml unless one already exists."""
    root = find_project_root()
    config_file = root / CONFIG_FILENAME
    if config_file.exists():
        print_warning(f"{CONFIG_FILENAME} already exists, skipping...")
        return 0

    save_yaml_file(default_config_data(), config_file)
    print_success(f"Created {config_file}")
    print_info("Edit db_folder, file_separator and scan_folders to match your project")
    return 0


@_click_cli.command(name="help", help="Show help message")
def _help_cmd() -> int:
    print_help()
    return 0


def main() -> int:
    """Main CLI entry point."""
    if len(sys.argv) < _MIN_ARGS or sys.argv[1] in ["--help", "-h"]:
        print_help()
        return 0

    try:
        result = _click_cli.main(
            args=sys.argv[1:],
            prog_name="dbsplit",
            standalone_mode=False,
        )
    except click.Abort:
        print("\n⚠️  Cancelled by user")
        return 130
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
