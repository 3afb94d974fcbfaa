"""Create folder structures from a declarative nested definition.

A definition is a tagged union of leaf strings, lists and mappings. Mapping
keys are intermediate folders, strings are leaf folders::

    {"constraints": ["checks", "foreigns"], "tables": "tables_ddl"}

creates ``constraints/checks``, ``constraints/foreigns`` and
``tables/tables_ddl``. An empty mapping or list below a key creates just the
key folder.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

FolderTree = Union[str, int, list["FolderTree"], dict[str, "FolderTree"], None]

# dbFlow schema layout; split targets and reverse-scan folders live here.
DEFAULT_SCHEMA_FOLDERS: dict[str, FolderTree] = {
    ".hooks": ["pre", "post"],
    "constraints": ["checks", "foreigns", "primaries", "uniques"],
    "contexts": None,
    "ddl": {"init": None, "patch": ["pre", "post"], "pre": None, "post": None},
    "dml": {"base": None, "init": None, "patch": ["pre", "post"], "pre": None, "post": None},
    "indexes": ["defaults", "primaries", "uniques"],
    "jobs": None,
    "policies": None,
    "sequences": None,
    "sources": ["functions", "packages", "procedures", "triggers", "types"],
    "tables": "tables_ddl",
    "tests": ["packages"],
    "views": None,
}


def tree_paths(tree: FolderTree, prefix: Path = Path()) -> list[Path]:
    """Flatten ``tree`` into the relative leaf folders it describes, depth-first."""
    if tree is None:
        return [prefix] if prefix != Path() else []
    if isinstance(tree, (str, int)):
        return [prefix / str(tree)]
    if isinstance(tree, list):
        if not tree:
            return tree_paths(None, prefix)
        paths: list[Path] = []
        for item in tree:
            paths.extend(tree_paths(item, prefix))
        return paths
    if isinstance(tree, dict):
        if not tree:
            return tree_paths(None, prefix)
        paths = []
        for name, subtree in tree.items():
            paths.extend(tree_paths(subtree, prefix / str(name)))
        return paths
    raise TypeError(f"Unsupported folder definition: {tree!r}")


def materialize_tree(tree: FolderTree, root: Path) -> list[Path]:
    """Create every folder described by ``tree`` below ``root``.

    Returns:
        Folders that did not exist before, in creation order.
    """
    root = Path(root)
    created: list[Path] = []
    for relative in tree_paths(tree):
        target = root / relative
        if target.is_dir():
            continue
        target.mkdir(parents=True, exist_ok=True)
        created.append(target)
    return created
