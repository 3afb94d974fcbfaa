"""Resolve marker paths against a schema folder.

A marker names a file relative to the resolution root, normally
``<project>/db/<schema>``. A leading ``../`` moves resolution one level up,
so split files can also live beside the schema folder:

    >>> resolve_marker_path("tables/orders.sql", Path("/p/db/app"))
    PosixPath('/p/db/app/tables/orders.sql')
    >>> resolve_marker_path("../_setup/users.sql", Path("/p/db/app"))
    PosixPath('/p/db/_setup/users.sql')
"""

from __future__ import annotations

from pathlib import Path

PARENT_ESCAPE = "../"


def has_parent_escape(marker_path: str) -> bool:
    """Return True when the marker path carries the parent-escape prefix."""
    return marker_path.startswith(PARENT_ESCAPE)


def strip_parent_escape(marker_path: str) -> str:
    """Return the bare relative path without the parent-escape prefix."""
    if has_parent_escape(marker_path):
        return marker_path[len(PARENT_ESCAPE):]
    return marker_path


def resolve_marker_path(marker_path: str, resolution_root: Path) -> Path:
    """Map a marker path to the absolute file it refers to.

    Args:
        marker_path: Path as written after the separator token.
        resolution_root: Default root (the schema folder).

    Returns:
        ``resolution_root.parent / path`` for escaped markers,
        ``resolution_root / path`` otherwise.
    """
    root = Path(resolution_root)
    if has_parent_escape(marker_path):
        return root.parent / strip_parent_escape(marker_path)
    return root / marker_path
