import pytest

import config
from core.character_import_service import CharacterImportService
from tests.fakes.fake_supabase_client import FakeSupabaseClient

BATCH = """MARY SMITH - CHARACTER GUIDE

CHARACTER DESCRIPTION
A singer with a secret.

YOUR SECRETS
You owe the victim money.

JOHN DOE - CHARACTER GUIDE

CHARACTER DESCRIPTION
A nervous banker.
"""


def _names(client: FakeSupabaseClient) -> list[str]:
    return [row["character_name"] for row in client.rows(config.CHARACTERS_TABLE)]


@pytest.mark.asyncio
class TestProcessAndSaveCharacter:
    async def test_saves_parsed_guide(self) -> None:
        client = FakeSupabaseClient()
        service = CharacterImportService(client, use_aliases=False)

        character_id = await service.process_and_save_character(
            "pkg-1", "MARY SMITH - CHARACTER GUIDE\n\nYOUR SECRETS\nYou owe money.\n"
        )

        assert character_id == "char-1"
        row = client.rows(config.CHARACTERS_TABLE)[0]
        assert row["character_name"] == "MARY SMITH"
        assert row["secrets"] == ["You owe money."]

    async def test_falls_back_to_first_line_for_name(self) -> None:
        client = FakeSupabaseClient()
        service = CharacterImportService(client, use_aliases=False)

        character_id = await service.process_and_save_character("pkg-1", "Lady Ashford - notes\nYOUR BACKGROUND\nOld money.\n")

        assert character_id is not None
        row = client.rows(config.CHARACTERS_TABLE)[0]
        assert row["character_name"] == "Lady Ashford"
        assert row["background"] == "Old money."

    async def test_unnamed_guide_is_skipped(self) -> None:
        client = FakeSupabaseClient()
        service = CharacterImportService(client, use_aliases=False)

        assert await service.process_and_save_character("pkg-1", "\nno header here") is None
        assert client.calls == []

    async def test_storage_failure_returns_none(self) -> None:
        client = FakeSupabaseClient()
        client.fail_on("insert")
        service = CharacterImportService(client, use_aliases=False)

        assert await service.process_and_save_character("pkg-1", "JOHN DOE - CHARACTER GUIDE\n") is None

    async def test_aliases_follow_configuration_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "ENABLE_SECTION_ALIASES", True)
        client = FakeSupabaseClient()
        service = CharacterImportService(client)

        await service.process_and_save_character("pkg-1", "THE COOK - CHARACTER GUIDE\n\nINTRODUCTION\nI made the soup.\n")

        assert service.use_aliases is True
        assert client.rows(config.CHARACTERS_TABLE)[0]["introduction"] == "I made the soup."


@pytest.mark.asyncio
class TestImportCharacterBatch:
    async def test_imports_every_guide_and_marks_package(self) -> None:
        client = FakeSupabaseClient()
        client.rows(config.PACKAGES_TABLE).append({"id": "pkg-1"})
        service = CharacterImportService(client, use_aliases=False)

        success, message = await service.import_character_batch("pkg-1", BATCH)

        assert success is True
        assert message == "Successfully imported 2 characters"
        assert _names(client) == ["MARY SMITH", "JOHN DOE"]
        assert client.rows(config.PACKAGES_TABLE)[0]["generation_status"]["status"] == "completed"

    async def test_refuses_when_package_already_has_characters(self) -> None:
        client = FakeSupabaseClient()
        client.rows(config.CHARACTERS_TABLE).append({"id": "old", "package_id": "pkg-1", "character_name": "OLD"})
        service = CharacterImportService(client, use_aliases=False)

        success, message = await service.import_character_batch("pkg-1", BATCH)

        assert success is False
        assert message == "Package already has characters; pass replace_existing to overwrite them"
        assert _names(client) == ["OLD"]

    async def test_replace_existing_deletes_previous_characters(self) -> None:
        client = FakeSupabaseClient()
        client.rows(config.CHARACTERS_TABLE).append({"id": "old", "package_id": "pkg-1", "character_name": "OLD"})
        client.rows(config.CHARACTERS_TABLE).append({"id": "other", "package_id": "pkg-2", "character_name": "KEEP"})
        service = CharacterImportService(client, use_aliases=False)

        success, _ = await service.import_character_batch("pkg-1", BATCH, replace_existing=True)

        assert success is True
        assert _names(client) == ["KEEP", "MARY SMITH", "JOHN DOE"]
        assert ("delete", config.CHARACTERS_TABLE) in client.calls

    async def test_failed_delete_aborts_import(self) -> None:
        client = FakeSupabaseClient()
        client.rows(config.CHARACTERS_TABLE).append({"id": "old", "package_id": "pkg-1", "character_name": "OLD"})
        client.fail_on("delete")
        service = CharacterImportService(client, use_aliases=False)

        success, message = await service.import_character_batch("pkg-1", BATCH, replace_existing=True)

        assert success is False
        assert message.startswith("Failed to remove existing characters:")
        assert ("insert", config.CHARACTERS_TABLE) not in client.calls

    async def test_document_without_guides_imports_nothing(self) -> None:
        client = FakeSupabaseClient()
        service = CharacterImportService(client, use_aliases=False)

        success, message = await service.import_character_batch("pkg-1", "Nothing useful here.")

        assert success is False
        assert message == "No characters were successfully imported"

    async def test_status_update_failure_still_reports_import(self) -> None:
        client = FakeSupabaseClient()
        client.fail_on("update")
        service = CharacterImportService(client, use_aliases=False)

        success, message = await service.import_character_batch("pkg-1", BATCH)

        assert success is True
        assert message == "Imported 2 characters but failed to update package status"
        assert len(_names(client)) == 2
