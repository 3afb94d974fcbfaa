"""
dbsplit

Split and join marker-delimited SQL install files for dbFlow style
database projects, and discover files that belong to a table.
"""

__version__ = "0.1.0"

from dbsplit.core.join_engine import join_file
from dbsplit.core.reverse_scanner import scan_file
from dbsplit.core.split_engine import split_file

__all__ = [
    "join_file",
    "scan_file",
    "split_file",
]
