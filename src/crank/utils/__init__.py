"""Utility functions for crank."""

from __future__ import annotations

from crank.utils.fs import copy_tree
from crank.utils.json_formatter import JSONFormatter
from crank.utils.logging import setup_logger
from crank.utils.naming import artifact_stem, title_case
from crank.utils.wait import wait_until

__all__ = [
    "JSONFormatter",
    "artifact_stem",
    "copy_tree",
    "setup_logger",
    "title_case",
    "wait_until",
]
