"""Utilities for fixloop."""

from fixloop.utils.diff_generator import generate_unified_diff, highlight_changes

__all__ = [
    "generate_unified_diff",
    "highlight_changes",
]
