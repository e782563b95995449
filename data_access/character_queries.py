# data_access/character_queries.py
"""Read and write character rows for mystery packages.

Every function takes the REST client explicitly so callers control its lifecycle.
Transport failures surface as [`DatabaseError`](core/exceptions.py:26) subclasses.
"""

from typing import Any

import httpx
import structlog

import config
from core.exceptions import ValidationError, handle_database_error
from core.http_client_service import SupabaseRestClient
from models import CharacterRecord, PackageGenerationStatus

logger = structlog.get_logger(__name__)


async def insert_character(client: SupabaseRestClient, package_id: str, record: CharacterRecord) -> str:
    """Insert one character row and return its id.

    Raises:
        ValidationError: If the record has no name.
        CharacterPersistenceError: If the store rejects the row.
        DatabaseConnectionError: If the store cannot be reached.
    """
    if not record.name:
        raise ValidationError("Character must have a name", details={"package_id": package_id})

    try:
        row = await client.insert(config.CHARACTERS_TABLE, record.to_row(package_id))
        character_id = str(row["id"])
    except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
        raise handle_database_error("insert_character", e, package_id=package_id, character=record.name) from e

    logger.debug("Saved character", character=record.name, character_id=character_id, package_id=package_id)
    return character_id


async def get_character_by_id(client: SupabaseRestClient, character_id: str) -> dict[str, Any] | None:
    """Return the stored row for `character_id`, or `None` if there is none."""
    try:
        rows = await client.select(config.CHARACTERS_TABLE, {"id": character_id})
    except httpx.HTTPError as e:
        raise handle_database_error("get_character_by_id", e, character_id=character_id) from e
    return rows[0] if rows else None


async def package_has_characters(client: SupabaseRestClient, package_id: str) -> bool:
    """Return whether any character rows exist for the package."""
    try:
        total = await client.count(config.CHARACTERS_TABLE, {"package_id": package_id})
    except httpx.HTTPError as e:
        raise handle_database_error("package_has_characters", e, package_id=package_id) from e
    return total > 0


async def delete_characters_for_package(client: SupabaseRestClient, package_id: str) -> None:
    """Remove every character row belonging to the package."""
    try:
        await client.delete(config.CHARACTERS_TABLE, {"package_id": package_id})
    except httpx.HTTPError as e:
        raise handle_database_error("delete_characters_for_package", e, package_id=package_id) from e
    logger.info("Deleted existing characters", package_id=package_id)


async def mark_character_import_complete(client: SupabaseRestClient, package_id: str) -> None:
    """Record on the package that character generation has finished."""
    status = PackageGenerationStatus()
    try:
        await client.update(
            config.PACKAGES_TABLE,
            {"generation_status": status.model_dump()},
            {"id": package_id},
        )
    except httpx.HTTPError as e:
        raise handle_database_error("mark_character_import_complete", e, package_id=package_id) from e
