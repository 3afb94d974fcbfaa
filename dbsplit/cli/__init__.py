"""
CLI module for dbsplit.

Provides the main entry point installed as the ``dbsplit`` console script.
"""

from .commands import main

__all__ = ["main"]
