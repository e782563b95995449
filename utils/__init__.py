"""General utility functions for the character import pipeline."""

from .text_processing import first_line, split_nonblank_lines, truncate_for_log

__all__ = [
    "first_line",
    "split_nonblank_lines",
    "truncate_for_log",
]
