# core/character_import_service.py
"""Import generated character guides into a mystery package.

The service splits a pasted or generated document into individual guides, parses
each one with [`extract_character_info()`](core/parsers/character_guide_parser.py:210)
and saves the result through [`data_access.character_queries`](data_access/character_queries.py:1).

A guide that cannot be named or saved is logged and skipped; the rest of the batch
still imports.
"""

from __future__ import annotations

import structlog

import config
from core.exceptions import MysteryCoreError
from core.http_client_service import SupabaseRestClient
from core.parsers.character_guide_parser import (
    extract_character_info,
    resolve_character_name,
    split_character_guides,
)
from data_access import character_queries
from utils.text_processing import truncate_for_log

logger = structlog.get_logger(__name__)


class CharacterImportService:
    """Parse character guides and persist them for one package at a time.

    Attributes:
        client: REST client used for every storage call.
        use_aliases: Whether older section headings are accepted as fallbacks.
    """

    def __init__(self, client: SupabaseRestClient, use_aliases: bool | None = None):
        self.client = client
        self.use_aliases = config.ENABLE_SECTION_ALIASES if use_aliases is None else use_aliases

    async def process_and_save_character(self, package_id: str, character_text: str) -> str | None:
        """Parse one guide and save it.

        Returns:
            The new character id, or `None` if the guide had no usable name or the
            row could not be stored.
        """
        record = extract_character_info(character_text, use_aliases=self.use_aliases)

        try:
            name = resolve_character_name(record, character_text)
        except MysteryCoreError as e:
            logger.error(str(e), package_id=package_id, text=truncate_for_log(character_text, 80))
            return None

        if name != record.name:
            logger.warning("Guide header missing; using first line as character name", character=name)
            record = record.model_copy(update={"name": name})

        try:
            return await character_queries.insert_character(self.client, package_id, record)
        except MysteryCoreError as e:
            logger.error("Failed to save character", character=name, package_id=package_id, error=str(e))
            return None

    async def import_characters_from_text(self, package_id: str, text: str) -> list[str]:
        """Split `text` into guides and save each one.

        Returns:
            Ids of the characters that were saved, in document order.
        """
        guides = split_character_guides(text)
        if not guides:
            logger.error("No character guides found in the provided text", package_id=package_id)
            return []

        saved_ids = []
        for guide in guides:
            character_id = await self.process_and_save_character(package_id, guide)
            if character_id:
                saved_ids.append(character_id)
                logger.info("Imported character", character_id=character_id, package_id=package_id)

        logger.info(f"Imported {len(saved_ids)} of {len(guides)} character guides", package_id=package_id)
        return saved_ids

    async def import_character_batch(self, package_id: str, text: str, replace_existing: bool = False) -> tuple[bool, str]:
        """Import a whole batch and mark the package's characters as generated.

        Args:
            package_id: Package the characters belong to.
            text: Document containing one or more character guides.
            replace_existing: Delete the package's current characters first. When
                false and characters already exist, nothing is imported.

        Returns:
            Tuple of (success: bool, message: str)
        """
        try:
            if await character_queries.package_has_characters(self.client, package_id):
                if not replace_existing:
                    return False, "Package already has characters; pass replace_existing to overwrite them"
                await character_queries.delete_characters_for_package(self.client, package_id)
        except MysteryCoreError as e:
            logger.error("Failed to prepare package for import", package_id=package_id, error=str(e))
            return False, f"Failed to remove existing characters: {e}"

        imported_ids = await self.import_characters_from_text(package_id, text)
        if not imported_ids:
            return False, "No characters were successfully imported"

        try:
            await character_queries.mark_character_import_complete(self.client, package_id)
        except MysteryCoreError as e:
            logger.error("Failed to update package status", package_id=package_id, error=str(e))
            return True, f"Imported {len(imported_ids)} characters but failed to update package status"

        return True, f"Successfully imported {len(imported_ids)} characters"


__all__ = ["CharacterImportService"]
