import httpx
import pytest

import config
from core.exceptions import CharacterPersistenceError, DatabaseConnectionError, ValidationError
from core.http_client_service import HTTPClientService, SupabaseRestClient
from data_access import character_queries
from models import CharacterRecord, Relationship
from tests.fakes.fake_supabase_client import FakeSupabaseClient


@pytest.mark.asyncio
class TestCharacterQueries:
    async def test_insert_character_stores_row_and_returns_id(self) -> None:
        client = FakeSupabaseClient()
        record = CharacterRecord(
            name="MARY SMITH",
            description="A singer.",
            relationships=[Relationship(character="John", description="rival")],
        )

        character_id = await character_queries.insert_character(client, "pkg-1", record)

        stored = client.rows(config.CHARACTERS_TABLE)
        assert character_id == "char-1"
        assert len(stored) == 1
        assert stored[0]["package_id"] == "pkg-1"
        assert stored[0]["character_name"] == "MARY SMITH"
        assert stored[0]["relationships"] == [{"character": "John", "description": "rival"}]
        assert stored[0]["secrets"] == []

    async def test_insert_character_without_name_is_rejected(self) -> None:
        client = FakeSupabaseClient()

        with pytest.raises(ValidationError, match="Character must have a name"):
            await character_queries.insert_character(client, "pkg-1", CharacterRecord(description="Nameless."))
        assert client.calls == []

    async def test_server_error_becomes_persistence_error(self) -> None:
        client = FakeSupabaseClient()
        client.fail_on("insert")

        with pytest.raises(CharacterPersistenceError) as exception_info:
            await character_queries.insert_character(client, "pkg-1", CharacterRecord(name="JOHN DOE"))

        assert exception_info.value.details["status_code"] == 500
        assert exception_info.value.details["operation"] == "insert_character"
        assert exception_info.value.details["character"] == "JOHN DOE"

    async def test_unreachable_store_becomes_connection_error(self) -> None:
        client = FakeSupabaseClient()
        request = httpx.Request("HEAD", "http://fake.local/rest/v1/mystery_characters")
        client.fail_on("count", httpx.ConnectError("connection refused", request=request))

        with pytest.raises(DatabaseConnectionError):
            await character_queries.package_has_characters(client, "pkg-1")

    @pytest.mark.parametrize("body", [[], [{}], [{"name": "JOHN DOE"}]], ids=["no-rows", "empty-row", "row-without-id"])
    async def test_insert_response_without_id_becomes_persistence_error(self, body) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json=body)

        async with HTTPClientService(transport=httpx.MockTransport(handler)) as http_client:
            client = SupabaseRestClient(http_client, base_url="http://fake.local", api_key="k")
            with pytest.raises(CharacterPersistenceError):
                await character_queries.insert_character(client, "pkg-1", CharacterRecord(name="JOHN DOE"))

    async def test_insert_timeout_does_not_store_character_twice(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "HTTP_RETRY_ATTEMPTS", 3)
        monkeypatch.setattr(config, "HTTP_RETRY_DELAY_SECONDS", 0)
        committed: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            # The row is stored even though the response never arrives
            committed.append(request.content)
            raise httpx.ReadTimeout("read timed out", request=request)

        async with HTTPClientService(transport=httpx.MockTransport(handler)) as http_client:
            client = SupabaseRestClient(http_client, base_url="http://fake.local", api_key="k")
            with pytest.raises(CharacterPersistenceError):
                await character_queries.insert_character(client, "pkg-1", CharacterRecord(name="JOHN DOE"))

        assert len(committed) == 1

    async def test_lookup_count_and_delete(self) -> None:
        client = FakeSupabaseClient()
        first = await character_queries.insert_character(client, "pkg-1", CharacterRecord(name="A"))
        await character_queries.insert_character(client, "pkg-2", CharacterRecord(name="B"))

        assert (await character_queries.get_character_by_id(client, first))["character_name"] == "A"
        assert await character_queries.get_character_by_id(client, "missing") is None
        assert await character_queries.package_has_characters(client, "pkg-1")

        await character_queries.delete_characters_for_package(client, "pkg-1")

        assert not await character_queries.package_has_characters(client, "pkg-1")
        assert await character_queries.package_has_characters(client, "pkg-2")

    async def test_mark_character_import_complete_updates_package(self) -> None:
        client = FakeSupabaseClient()
        client.rows(config.PACKAGES_TABLE).append({"id": "pkg-1", "generation_status": {"status": "generating"}})

        await character_queries.mark_character_import_complete(client, "pkg-1")

        status = client.rows(config.PACKAGES_TABLE)[0]["generation_status"]
        assert status["status"] == "completed"
        assert status["progress"] == 100
        assert status["sections"]["characters"] is True
        assert ("update", config.PACKAGES_TABLE) in client.calls
