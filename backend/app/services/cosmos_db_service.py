"""
Azure Cosmos DB Service
Provides persistence for vocabulary items, practice records and game sessions.
All containers use the learner id as partition key for efficient queries.

Store failures are logged and raised as StoreUnavailable so callers can
retry the whole operation; they are never turned into empty results.
"""
import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from azure.core import MatchConditions
from azure.core.exceptions import ServiceRequestError, ServiceResponseError
from azure.cosmos import exceptions
from azure.cosmos.aio import CosmosClient

from app.config import Settings, get_settings
from app.core.exceptions import LearningEngineError, StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = {408, 429}
PRECONDITION_FAILED = 412


class CosmosDBService:
    """Service for Azure Cosmos DB operations"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.database_name = self.settings.COSMOS_DB_DATABASE_NAME
        self.timeout = self.settings.COSMOS_DB_TIMEOUT_SECONDS
        self._client: Optional[CosmosClient] = None
        self.database = None
        self.containers = {}

        # Container names from settings
        self.container_names = {
            "vocabulary": self.settings.COSMOS_DB_VOCABULARY_CONTAINER,
            "practice_records": self.settings.COSMOS_DB_PRACTICE_RECORDS_CONTAINER,
            "game_sessions": self.settings.COSMOS_DB_GAME_SESSIONS_CONTAINER
        }

    @property
    def client(self) -> CosmosClient:
        """Create the Cosmos client on first use."""
        if self._client is None:
            if not self.settings.COSMOS_DB_ENDPOINT or not self.settings.COSMOS_DB_KEY:
                raise StoreUnavailable("Cosmos DB endpoint or key is not configured", operation="connect")
            self._client = CosmosClient(
                url=self.settings.COSMOS_DB_ENDPOINT,
                credential=self.settings.COSMOS_DB_KEY,
                connection_timeout=self.timeout
            )
        return self._client

    async def close(self):
        """Close the underlying client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            self.database = None
            self.containers = {}

    def _get_container(self, container_key: str):
        """Get a container by key."""
        if container_key not in self.containers:
            container_name = self.container_names.get(container_key)
            if not container_name:
                raise ValueError(f"Unknown container key: {container_key}")
            if not self.database:
                self.database = self.client.get_database_client(self.database_name)
            self.containers[container_key] = self.database.get_container_client(container_name)
        return self.containers[container_key]

    def _raise_store_error(self, error: Exception, operation: str):
        """Re-raise a driver error as the matching engine error."""
        translated = self._translate(error, operation)
        if translated is error:
            raise error
        raise translated from error

    def _translate(self, error: Exception, operation: str) -> Exception:
        if isinstance(error, LearningEngineError):
            return error
        if isinstance(error, (asyncio.TimeoutError, ServiceRequestError, ServiceResponseError)):
            return StoreUnavailable(f"Item store unreachable during {operation}", operation=operation)
        if isinstance(error, exceptions.CosmosHttpResponseError):
            status = error.status_code or 0
            if status == PRECONDITION_FAILED:
                return ValidationError(f"Item changed concurrently during {operation}", field="_etag")
            if status in TRANSIENT_STATUS_CODES or status >= 500:
                return StoreUnavailable(
                    f"Item store returned {status} during {operation}",
                    operation=operation
                )
            return LearningEngineError(
                f"Item store rejected {operation} ({status})",
                code="STORE_ERROR",
                status_code=500,
                details={"operation": operation, "status": status}
            )
        return error

    # ==================== GENERIC CRUD OPERATIONS ====================

    async def get_item(
        self,
        container_key: str,
        item_id: str,
        partition_key: str
    ) -> Optional[dict]:
        """Get an item by ID and partition key."""
        try:
            container = self._get_container(container_key)
            return await asyncio.wait_for(
                container.read_item(item=item_id, partition_key=partition_key),
                timeout=self.timeout
            )
        except exceptions.CosmosResourceNotFoundError:
            return None
        except Exception as e:
            logger.error(f"Get item error in {container_key}: {e}")
            self._raise_store_error(e, f"get {container_key}")

    async def upsert_item(
        self,
        container_key: str,
        item: dict,
        partition_key: str
    ) -> dict:
        """Create or update an item."""
        try:
            container = self._get_container(container_key)
            item["partitionKey"] = partition_key
            item["updatedAt"] = datetime.utcnow().isoformat()
            if not item.get("createdAt"):
                item["createdAt"] = datetime.utcnow().isoformat()
            result = await asyncio.wait_for(container.upsert_item(body=item), timeout=self.timeout)
            logger.debug(f"Upserted item in {container_key}: {item.get('id')}")
            return result
        except Exception as e:
            logger.error(f"Upsert item error in {container_key}: {e}")
            self._raise_store_error(e, f"upsert {container_key}")

    async def replace_item(
        self,
        container_key: str,
        item: dict,
        partition_key: str,
        etag: Optional[str] = None
    ) -> dict:
        """
        Replace an existing item with a full document.

        With an etag the write only succeeds if the stored item is unchanged
        since it was read; otherwise ValidationError is raised.
        """
        try:
            container = self._get_container(container_key)
            item["partitionKey"] = partition_key
            item["updatedAt"] = datetime.utcnow().isoformat()
            conditions = {}
            if etag:
                conditions = {"etag": etag, "match_condition": MatchConditions.IfNotModified}
            result = await asyncio.wait_for(
                container.replace_item(item=item["id"], body=item, **conditions),
                timeout=self.timeout
            )
            logger.debug(f"Replaced item in {container_key}: {item['id']}")
            return result
        except Exception as e:
            logger.error(f"Replace item error in {container_key}: {e}")
            self._raise_store_error(e, f"replace {container_key}")

    async def query_items(
        self,
        container_key: str,
        query: str,
        parameters: Optional[list] = None,
        partition_key: Optional[str] = None
    ) -> list:
        """Query items using SQL."""
        try:
            container = self._get_container(container_key)
            return await asyncio.wait_for(
                self._collect(container, query, parameters or [], partition_key),
                timeout=self.timeout
            )
        except Exception as e:
            logger.error(f"Query error in {container_key}: {e}")
            self._raise_store_error(e, f"query {container_key}")

    async def _collect(self, container, query: str, parameters: list, partition_key: Optional[str]) -> list:
        items = []
        async for item in container.query_items(
            query=query,
            parameters=parameters,
            partition_key=partition_key
        ):
            items.append(item)
        return items

    # ==================== VOCABULARY ====================

    async def get_vocabulary_item(self, user_id: str, vocabulary_id: str) -> Optional[dict]:
        """Get one vocabulary item of a learner."""
        return await self.get_item("vocabulary", vocabulary_id, user_id)

    async def get_vocabulary(self, user_id: str) -> list:
        """Get all vocabulary items of a learner."""
        query = "SELECT * FROM c WHERE c.partitionKey = @user_id"
        parameters = [{"name": "@user_id", "value": user_id}]
        return await self.query_items("vocabulary", query, parameters, user_id)

    async def get_vocabulary_due_for_review(self, user_id: str, today: date) -> list:
        """Get vocabulary items never scheduled or due on or before today."""
        # Compared against tomorrow so full ISO datetimes on today still match
        query = """
            SELECT * FROM c
            WHERE c.partitionKey = @user_id
            AND (NOT IS_DEFINED(c.nextReview) OR IS_NULL(c.nextReview) OR c.nextReview < @tomorrow)
        """
        parameters = [
            {"name": "@user_id", "value": user_id},
            {"name": "@tomorrow", "value": (today + timedelta(days=1)).isoformat()}
        ]
        return await self.query_items("vocabulary", query, parameters, user_id)

    async def get_new_vocabulary(self, user_id: str, limit: int) -> list:
        """Get never-scheduled vocabulary items, most recently created first."""
        query = """
            SELECT TOP @limit * FROM c
            WHERE c.partitionKey = @user_id
            AND (NOT IS_DEFINED(c.nextReview) OR IS_NULL(c.nextReview))
            ORDER BY c.createdAt DESC
        """
        parameters = [
            {"name": "@user_id", "value": user_id},
            {"name": "@limit", "value": limit}
        ]
        return await self.query_items("vocabulary", query, parameters, user_id)

    async def get_distractor_pool(self, user_id: str, exclude_id: str, limit: int) -> list:
        """Get other vocabulary items of a learner to draw distractors from."""
        query = """
            SELECT TOP @limit * FROM c
            WHERE c.partitionKey = @user_id
            AND c.id != @exclude_id
        """
        parameters = [
            {"name": "@user_id", "value": user_id},
            {"name": "@exclude_id", "value": exclude_id},
            {"name": "@limit", "value": limit}
        ]
        return await self.query_items("vocabulary", query, parameters, user_id)

    async def save_vocabulary_item(self, user_id: str, item: dict) -> dict:
        """Write back a full vocabulary item."""
        item["userId"] = user_id
        return await self.upsert_item("vocabulary", item, user_id)

    # ==================== PRACTICE RECORDS ====================

    async def get_practice_record(self, user_id: str, record_id: str) -> Optional[dict]:
        """Get one practice record."""
        return await self.get_item("practice_records", record_id, user_id)

    async def save_practice_record(self, user_id: str, record: dict) -> dict:
        """Write a practice record. Idempotent by record id."""
        record["userId"] = user_id
        return await self.upsert_item("practice_records", record, user_id)

    async def get_practice_records(
        self,
        user_id: str,
        vocabulary_id: Optional[str] = None
    ) -> list:
        """Get practice records of a learner in creation order."""
        if vocabulary_id:
            query = """
                SELECT * FROM c
                WHERE c.partitionKey = @user_id
                AND c.vocabularyId = @vocabulary_id
                ORDER BY c.createdAt ASC
            """
            parameters = [
                {"name": "@user_id", "value": user_id},
                {"name": "@vocabulary_id", "value": vocabulary_id}
            ]
        else:
            query = "SELECT * FROM c WHERE c.partitionKey = @user_id ORDER BY c.createdAt ASC"
            parameters = [{"name": "@user_id", "value": user_id}]
        return await self.query_items("practice_records", query, parameters, user_id)

    # ==================== GAME SESSIONS ====================

    async def get_game_session(self, user_id: str, session_id: str) -> Optional[dict]:
        """Get a game session."""
        return await self.get_item("game_sessions", session_id, user_id)

    async def save_game_session(self, user_id: str, session: dict) -> dict:
        """Create or replace a game session."""
        session["userId"] = user_id
        return await self.upsert_item("game_sessions", session, user_id)

    async def replace_game_session(self, user_id: str, session: dict, etag: Optional[str] = None) -> dict:
        """Replace a game session, only if unchanged since read when an etag is given."""
        session["userId"] = user_id
        return await self.replace_item("game_sessions", session, user_id, etag=etag)
