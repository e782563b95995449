# core/parsers/character_guide_parser.py
"""Extract structured character records from generated character guide text.

The language model is instructed to write every guide as a sequence of all-caps
section headings (``YOUR BACKGROUND``, ``YOUR SECRETS``, ...) each followed by a
free-text body. This module pulls those bodies back out:

1. [`extract_section()`](core/parsers/character_guide_parser.py:85) locates a labelled
   section and returns its body up to the next heading-looking line.
2. [`extract_character_info()`](core/parsers/character_guide_parser.py:210) assembles a
   [`CharacterRecord`](models/character_models.py:54) from the known sections.
3. [`split_character_guides()`](core/parsers/character_guide_parser.py:254) cuts a
   multi-character document into one text per guide.

Every function here is pure. Malformed or partial guides never raise; anything
that cannot be found is simply left absent on the returned record.
"""

from __future__ import annotations

import re

import structlog

from core.exceptions import CharacterNameError
from models.character_models import (
    CharacterRecord,
    QuestioningOption,
    Relationship,
    RoleStatements,
    RoundScripts,
)
from utils.text_processing import first_line, split_nonblank_lines

logger = structlog.get_logger(__name__)

# Record field -> section heading the prompt templates emit.
SECTION_LABELS: dict[str, str] = {
    "description": "CHARACTER DESCRIPTION",
    "background": "YOUR BACKGROUND",
    "whereabouts": "YOUR WHEREABOUTS",
    "introduction": "YOUR INTRODUCTION",
    "round1_statement": "ROUND 1",
    "round2_statement": "ROUND 2",
    "round3_statement": "ROUND 3",
}

# Headings used by older prompt templates, tried only when the primary label is missing.
SECTION_ALIASES: dict[str, tuple[str, ...]] = {
    "introduction": ("INTRODUCTION",),
    "round1_statement": ("INITIAL INVESTIGATION",),
    "round2_statement": ("DEEPER REVELATIONS",),
    "round3_statement": ("FINAL CLUES",),
}

RELATIONSHIPS_LABEL = "YOUR RELATIONSHIPS"
SECRETS_LABEL = "YOUR SECRETS"
QUESTIONING_LABEL = "CHOOSE SOMEONE TO QUESTION"
RESPONSES_LABEL = "YOUR RESPONSES WHEN QUESTIONED"
FINAL_STATEMENT_LABEL = "FINAL STATEMENT"

# A line made only of uppercase letters and spaces, optionally colon-terminated.
# Case-sensitive, so sentence-case body lines never end a section.
_NEXT_HEADING_RE = re.compile(r"\n\s*[A-Z][A-Z\s]+[A-Z]:?\s*\n")

_NAME_HEADER_RE = re.compile(r"([A-Z][A-Z\s]+[A-Z])\s*-\s*CHARACTER GUIDE", re.IGNORECASE)
_GUIDE_SPLIT_RE = re.compile(r"([A-Z][A-Z\s]+[A-Z])\s*-\s*CHARACTER GUIDE")

_ASK_RE = re.compile(r"Ask\s+([^:]+):\s*[\"“”]([^\"“”]+)[\"“”]", re.IGNORECASE)

_ROLE_MARKERS: dict[str, str] = {
    "innocent": "IF YOU ARE INNOCENT",
    "guilty": "IF YOU ARE GUILTY",
    "accomplice": "IF YOU ARE ACCOMPLICE",
}
_ROLE_RES: dict[str, re.Pattern[str]] = {
    role: re.compile(
        rf"{marker}:\s*(.+?)(?=(?:{'|'.join(m for r, m in _ROLE_MARKERS.items() if r != role)})|\Z)",
        re.IGNORECASE | re.DOTALL,
    )
    for role, marker in _ROLE_MARKERS.items()
}


def extract_section(text: str | None, section_label: str) -> str | None:
    """Return the trimmed body of the section headed by `section_label`.

    The heading matches case-insensitively and may be followed by a colon. The body
    runs from the line after the heading to the next line that looks like a
    heading (uppercase letters and spaces only) or to the end of the text.

    Args:
        text: Full guide text.
        section_label: Heading to look for, e.g. ``"YOUR BACKGROUND"``.

    Returns:
        The section body with surrounding whitespace removed, or `None` if the
        heading does not occur.
    """
    if not text or not section_label:
        return None

    locator = re.compile(rf"{re.escape(section_label)}\s*:?\s*\n", re.IGNORECASE)
    match = locator.search(text)
    if match is None:
        return None

    start = match.end()
    next_heading = _NEXT_HEADING_RE.search(text, start)
    end = next_heading.start() if next_heading else len(text)

    return text[start:end].strip()


def extract_questioning_options(text: str | None) -> list[QuestioningOption]:
    """Find every ``Ask <Target>: "<Question>"`` prompt in `text`, in order."""
    if not text:
        return []

    return [
        QuestioningOption(target=match.group(1).strip(), question=match.group(2).strip())
        for match in _ASK_RE.finditer(text)
    ]


def extract_relationships(text: str | None) -> list[Relationship]:
    """Parse ``Name: description`` lines.

    Each non-blank line is split at its first colon. A line with no colon, or one
    that starts with the colon, becomes a relationship with the whole line as the
    character and an empty description.
    """
    relationships = []
    for line in split_nonblank_lines(text):
        colon_index = line.find(":")
        if colon_index > 0:
            relationships.append(
                Relationship(
                    character=line[:colon_index].strip(),
                    description=line[colon_index + 1 :].strip(),
                )
            )
        else:
            relationships.append(Relationship(character=line, description=""))
    return relationships


def extract_secrets(text: str | None) -> list[str]:
    """Return one secret per non-blank line, preserving order."""
    return [line.strip() for line in split_nonblank_lines(text)]


def extract_role_statements(text: str | None) -> RoleStatements:
    """Split ``IF YOU ARE INNOCENT: / GUILTY: / ACCOMPLICE:`` blocks apart.

    Each block runs to the next of the other two markers or to the end of the text.
    """
    statements = RoleStatements()
    if not text:
        return statements

    for role, pattern in _ROLE_RES.items():
        match = pattern.search(text)
        if match:
            setattr(statements, role, match.group(1).strip())
    return statements


def extract_character_name(text: str | None) -> str | None:
    """Return the name from a ``<NAME> - CHARACTER GUIDE`` header, if any."""
    if not text:
        return None
    match = _NAME_HEADER_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def _extract_with_aliases(text: str, field: str, use_aliases: bool) -> str | None:
    value = extract_section(text, SECTION_LABELS[field])
    if value or not use_aliases:
        return value
    for alias in SECTION_ALIASES.get(field, ()):
        value = extract_section(text, alias)
        if value:
            return value
    return value


def _extract_round_scripts(text: str) -> RoundScripts | None:
    round_scripts = RoundScripts()

    responses_text = extract_section(text, RESPONSES_LABEL)
    if responses_text:
        statements = extract_role_statements(responses_text)
        if not statements.is_empty():
            round_scripts.round1 = statements

    # A final statement is kept even without role markers.
    final_text = extract_section(text, FINAL_STATEMENT_LABEL)
    if final_text:
        round_scripts.final = extract_role_statements(final_text)

    if round_scripts.round1 is None and round_scripts.final is None:
        return None
    return round_scripts


def extract_character_info(text: str | None, *, use_aliases: bool = False) -> CharacterRecord:
    """Build a character record from one guide.

    Args:
        text: Raw guide text for a single character.
        use_aliases: When true, fall back to the headings listed in
            `SECTION_ALIASES` for sections whose primary heading is missing.

    Returns:
        A record whose fields are `None` wherever the guide lacks the section.
        `name` is `None` when the guide has no ``- CHARACTER GUIDE`` header; see
        [`resolve_character_name()`](core/parsers/character_guide_parser.py:272).
    """
    record = CharacterRecord()
    if not text:
        return record

    record.name = extract_character_name(text)

    for field in SECTION_LABELS:
        setattr(record, field, _extract_with_aliases(text, field, use_aliases))

    relationships_text = extract_section(text, RELATIONSHIPS_LABEL)
    if relationships_text:
        record.relationships = extract_relationships(relationships_text)

    secrets_text = extract_section(text, SECRETS_LABEL)
    if secrets_text:
        record.secrets = extract_secrets(secrets_text)

    questioning_text = extract_section(text, QUESTIONING_LABEL)
    if questioning_text:
        record.questioning_options = extract_questioning_options(questioning_text)

    record.round_scripts = _extract_round_scripts(text)

    logger.debug(
        "Extracted character guide",
        character=record.name,
        sections=sorted(record.model_dump(exclude_none=True, exclude={"name"})),
    )
    return record


def split_character_guides(text: str | None) -> list[str]:
    """Cut a multi-character document into one text per ``CHARACTER GUIDE`` header.

    Text before the first header is dropped. Each returned guide starts with its
    rebuilt ``<NAME> - CHARACTER GUIDE`` header line.
    """
    if not text:
        return []

    # re.split with one group yields [preamble, name, body, name, body, ...]
    parts = _GUIDE_SPLIT_RE.split(text)
    guides = []
    for index in range(1, len(parts) - 1, 2):
        name = parts[index].strip()
        guides.append(f"{name} - CHARACTER GUIDE\n{parts[index + 1]}")
    return guides


def resolve_character_name(record: CharacterRecord, text: str | None) -> str:
    """Return the record's name, or fall back to the first line of the guide.

    The fallback keeps the part of the first line before any ``-``.

    Raises:
        CharacterNameError: If neither the record nor the first line yields a name.
    """
    if record.name:
        return record.name

    name = first_line(text).split("-")[0].strip()
    if not name:
        raise CharacterNameError("Could not determine character name from text")
    return name


__all__ = [
    "SECTION_ALIASES",
    "SECTION_LABELS",
    "extract_character_info",
    "extract_character_name",
    "extract_questioning_options",
    "extract_relationships",
    "extract_role_statements",
    "extract_secrets",
    "extract_section",
    "resolve_character_name",
    "split_character_guides",
]
