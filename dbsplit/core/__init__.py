"""Split/join engine and reverse reference scanner."""

from dbsplit.core.join_engine import join_document, join_file
from dbsplit.core.reverse_scanner import scan, scan_file
from dbsplit.core.split_engine import split_document, split_file

__all__ = [
    "join_document",
    "join_file",
    "scan",
    "scan_file",
    "split_document",
    "split_file",
]
