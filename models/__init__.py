"""Export the model types shared by the parsers and the data access layer."""

from .character_models import (
    CharacterRecord,
    PackageGenerationStatus,
    QuestioningOption,
    Relationship,
    RoleStatements,
    RoundScripts,
)

__all__ = [
    "CharacterRecord",
    "PackageGenerationStatus",
    "QuestioningOption",
    "Relationship",
    "RoleStatements",
    "RoundScripts",
]
