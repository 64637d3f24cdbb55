"""
Tests for CosmosDBService error handling and queries.
"""
import asyncio
import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from azure.core import MatchConditions
from azure.core.exceptions import ServiceRequestError
from azure.cosmos import exceptions

from app.core.exceptions import LearningEngineError, StoreUnavailable, ValidationError
from app.services.cosmos_db_service import CosmosDBService


@pytest.fixture
def cosmos_service(test_settings):
    return CosmosDBService(test_settings)


@pytest.fixture
def container():
    container = MagicMock()
    container.read_item = AsyncMock()
    container.upsert_item = AsyncMock(side_effect=lambda body: body)
    container.replace_item = AsyncMock(side_effect=lambda item, body, **kwargs: body)
    return container


class TestConfiguration:
    """Client creation."""

    def test_unconfigured_client_is_unavailable(self, cosmos_service):
        with pytest.raises(StoreUnavailable):
            cosmos_service.client

    @pytest.mark.asyncio
    async def test_unconfigured_read_is_unavailable(self, cosmos_service):
        with pytest.raises(StoreUnavailable):
            await cosmos_service.get_vocabulary_item("test_user_123", "v1")

    @pytest.mark.asyncio
    async def test_close_without_client(self, cosmos_service):
        await cosmos_service.close()

        assert cosmos_service._client is None


class TestErrorTranslation:
    """Driver errors become engine errors."""

    @pytest.mark.parametrize("error", [
        asyncio.TimeoutError(),
        ServiceRequestError("connection refused"),
        exceptions.CosmosHttpResponseError(status_code=429, message="throttled"),
        exceptions.CosmosHttpResponseError(status_code=503, message="unavailable"),
    ])
    def test_transient_errors(self, cosmos_service, error):
        translated = cosmos_service._translate(error, "get vocabulary")

        assert isinstance(translated, StoreUnavailable)
        assert translated.retryable is True

    def test_rejected_request(self, cosmos_service):
        error = exceptions.CosmosHttpResponseError(status_code=400, message="bad query")

        translated = cosmos_service._translate(error, "query vocabulary")

        assert type(translated) is LearningEngineError
        assert translated.code == "STORE_ERROR"
        assert translated.retryable is False

    def test_precondition_failure_is_validation_error(self, cosmos_service):
        error = exceptions.CosmosAccessConditionFailedError(status_code=412, message="etag mismatch")

        translated = cosmos_service._translate(error, "replace game_sessions")

        assert isinstance(translated, ValidationError)
        assert translated.status_code == 400

    def test_engine_errors_pass_through(self, cosmos_service):
        error = StoreUnavailable("not configured")

        assert cosmos_service._translate(error, "connect") is error


class TestItemAccess:
    """Reads and writes through a container."""

    @pytest.mark.asyncio
    async def test_missing_item_is_none(self, cosmos_service, container):
        container.read_item.side_effect = exceptions.CosmosResourceNotFoundError(status_code=404, message="gone")

        with patch.object(cosmos_service, "_get_container", return_value=container):
            assert await cosmos_service.get_vocabulary_item("test_user_123", "v1") is None

    @pytest.mark.asyncio
    async def test_read_uses_learner_partition(self, cosmos_service, container):
        container.read_item.return_value = {"id": "v1"}

        with patch.object(cosmos_service, "_get_container", return_value=container):
            document = await cosmos_service.get_vocabulary_item("test_user_123", "v1")

        assert document == {"id": "v1"}
        container.read_item.assert_awaited_once_with(item="v1", partition_key="test_user_123")

    @pytest.mark.asyncio
    async def test_timeout_raises_store_unavailable(self, cosmos_service, container):
        container.read_item.side_effect = asyncio.TimeoutError()

        with patch.object(cosmos_service, "_get_container", return_value=container):
            with pytest.raises(StoreUnavailable):
                await cosmos_service.get_vocabulary_item("test_user_123", "v1")

    @pytest.mark.asyncio
    async def test_save_sets_partition_and_owner(self, cosmos_service, container):
        with patch.object(cosmos_service, "_get_container", return_value=container):
            saved = await cosmos_service.save_practice_record("test_user_123", {"id": "record_1"})

        assert saved["partitionKey"] == "test_user_123"
        assert saved["userId"] == "test_user_123"
        assert saved["createdAt"]

    @pytest.mark.asyncio
    async def test_due_query_parameters(self, cosmos_service):
        with patch.object(cosmos_service, "query_items", AsyncMock(return_value=[])) as query_items:
            await cosmos_service.get_vocabulary_due_for_review("test_user_123", date(2024, 3, 15))

        container_key, query, parameters, partition_key = query_items.call_args.args
        assert container_key == "vocabulary"
        assert "IS_NULL(c.nextReview)" in query
        assert "c.nextReview < @tomorrow" in query
        assert {"name": "@tomorrow", "value": "2024-03-16"} in parameters
        assert partition_key == "test_user_123"

    @pytest.mark.asyncio
    async def test_game_session_replace_is_conditional(self, cosmos_service, container):
        with patch.object(cosmos_service, "_get_container", return_value=container):
            await cosmos_service.replace_game_session("test_user_123", {"id": "game-1"}, etag="etag-1")

        kwargs = container.replace_item.call_args.kwargs
        assert kwargs["item"] == "game-1"
        assert kwargs["etag"] == "etag-1"
        assert kwargs["match_condition"] == MatchConditions.IfNotModified
        assert kwargs["body"]["userId"] == "test_user_123"

    @pytest.mark.asyncio
    async def test_replace_without_etag_is_unconditional(self, cosmos_service, container):
        with patch.object(cosmos_service, "_get_container", return_value=container):
            await cosmos_service.replace_game_session("test_user_123", {"id": "game-1"})

        assert "match_condition" not in container.replace_item.call_args.kwargs

    @pytest.mark.asyncio
    async def test_concurrent_change_rejected(self, cosmos_service, container):
        container.replace_item.side_effect = exceptions.CosmosAccessConditionFailedError(
            status_code=412, message="etag mismatch"
        )

        with patch.object(cosmos_service, "_get_container", return_value=container):
            with pytest.raises(ValidationError):
                await cosmos_service.replace_game_session("test_user_123", {"id": "game-1"}, etag="etag-1")
