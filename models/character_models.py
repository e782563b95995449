# models/character_models.py
"""Define the structured shapes extracted from character guide documents.

A [`CharacterRecord`](models/character_models.py:54) is built once per raw guide text,
handed to the persistence layer and then dropped; it is a transient value object.

Notes:
- Optional fields default to `None` ("absent") rather than empty values when the
  matching guide section is missing. `model_dump(exclude_none=True)` therefore
  contains only what the guide actually provided.
- [`to_row()`](models/character_models.py:77) is the single place that maps absence onto
  storage columns: missing and empty text both become `NULL`, missing lists become `[]`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Relationship(BaseModel):
    """Describe how the guide's character relates to another character."""

    character: str
    description: str = ""


class QuestioningOption(BaseModel):
    """A suggested in-game prompt for questioning another character."""

    target: str
    question: str


class RoleStatements(BaseModel):
    """Scripted lines that depend on the role the player was secretly assigned."""

    innocent: str | None = None
    guilty: str | None = None
    accomplice: str | None = None

    def is_empty(self) -> bool:
        return self.innocent is None and self.guilty is None and self.accomplice is None


class RoundScripts(BaseModel):
    """Role-dependent scripts keyed by the point in the game they are read."""

    round1: RoleStatements | None = None
    final: RoleStatements | None = None


class CharacterRecord(BaseModel):
    """Represent one character parsed out of a guide.

    Notes:
        - `name` is required for persistence but may be `None` straight out of
          extraction; callers apply a fallback before saving.
        - List fields are `None` when their section is missing and a (possibly
          empty) list when the section exists.
    """

    name: str | None = None
    description: str | None = None
    background: str | None = None
    whereabouts: str | None = None
    introduction: str | None = None
    round1_statement: str | None = None
    round2_statement: str | None = None
    round3_statement: str | None = None
    relationships: list[Relationship] | None = None
    secrets: list[str] | None = None
    questioning_options: list[QuestioningOption] | None = None
    round_scripts: RoundScripts | None = None

    def to_row(self, package_id: str) -> dict[str, Any]:
        """Convert the record to a `mystery_characters` row payload.

        Args:
            package_id: Identifier of the mystery package that owns the character.

        Returns:
            A JSON-serializable dictionary keyed by column name.
        """
        row: dict[str, Any] = {
            "package_id": package_id,
            "character_name": self.name,
            "description": self.description or None,
            "background": self.background or None,
            "relationships": [r.model_dump() for r in self.relationships or []],
            "secrets": list(self.secrets or []),
            "introduction": self.introduction or None,
            "whereabouts": self.whereabouts or None,
            "round1_statement": self.round1_statement or None,
            "round2_statement": self.round2_statement or None,
            "round3_statement": self.round3_statement or None,
            "questioning_options": [q.model_dump() for q in self.questioning_options or []],
        }
        if self.round_scripts is not None:
            row["round_scripts"] = self.round_scripts.model_dump(exclude_none=True)
        return row


class PackageGenerationStatus(BaseModel):
    """Progress payload stored on a mystery package."""

    status: str = "completed"
    progress: int = Field(100, ge=0, le=100)
    currentStep: str = "Character import completed"
    sections: dict[str, bool] = Field(default_factory=lambda: {"characters": True, "hostGuide": True, "clues": True})
