# core/parsers/__init__.py
"""Parser modules for generated mystery content.

This package contains parsers for converting language-model output into
structured records ready for persistence.
"""

from .character_guide_parser import (
    extract_character_info,
    extract_questioning_options,
    extract_section,
    resolve_character_name,
    split_character_guides,
)

__all__ = [
    "extract_character_info",
    "extract_questioning_options",
    "extract_section",
    "resolve_character_name",
    "split_character_guides",
]
