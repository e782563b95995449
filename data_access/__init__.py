from .character_queries import (
    delete_characters_for_package,
    get_character_by_id,
    insert_character,
    mark_character_import_complete,
    package_has_characters,
)

__all__ = [
    "delete_characters_for_package",
    "get_character_by_id",
    "insert_character",
    "mark_character_import_complete",
    "package_has_characters",
]
