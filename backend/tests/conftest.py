"""
Pytest configuration and fixtures for tests.
"""
import random
import pytest
from datetime import date
from unittest.mock import AsyncMock

from app.agents.orchestrator import LearningEngine
from app.config import Settings
from app.services.cosmos_db_service import CosmosDBService
from app.services.question_augmenter import NullQuestionAugmenter


TEST_USER_ID = "test_user_123"
TODAY = date(2024, 3, 15)


@pytest.fixture
def test_settings():
    """Settings with defaults only; no Azure services configured."""
    return Settings(
        _env_file=None,
        COSMOS_DB_ENDPOINT=None,
        COSMOS_DB_KEY=None,
        AZURE_OPENAI_API_KEY=None,
        AZURE_OPENAI_ENDPOINT=None,
        QUESTION_AUGMENTATION_ENABLED=False
    )


@pytest.fixture
def mock_cosmos_service():
    """Mock Cosmos DB service with an empty store."""
    service = AsyncMock(spec=CosmosDBService)

    service.get_vocabulary_item.return_value = None
    service.get_vocabulary.return_value = []
    service.get_vocabulary_due_for_review.return_value = []
    service.get_new_vocabulary.return_value = []
    service.get_distractor_pool.return_value = []
    service.get_practice_record.return_value = None
    service.get_practice_records.return_value = []
    service.get_game_session.return_value = None
    service.save_vocabulary_item.side_effect = lambda user_id, item: item
    service.save_practice_record.side_effect = lambda user_id, record: record
    service.save_game_session.side_effect = lambda user_id, session: session
    service.replace_game_session.side_effect = lambda user_id, session, etag=None: session

    return service


@pytest.fixture
def make_vocab_doc():
    """Factory for stored vocabulary documents (camelCase keys)."""
    def _make(vocab_id: str, word: str, definition: str = "", **overrides) -> dict:
        document = {
            "id": vocab_id,
            "userId": TEST_USER_ID,
            "word": word,
            "definition": definition,
            "partOfSpeech": "noun",
            "example": "",
            "createdAt": "2024-01-01T00:00:00"
        }
        document.update(overrides)
        return document
    return _make


@pytest.fixture
def sample_vocabulary_docs(make_vocab_doc):
    """A small vocabulary of a learner."""
    return [
        make_vocab_doc("v1", "serendipity", "finding good things by chance",
                       example="Meeting her there was pure serendipity.",
                       translation="serendipia"),
        make_vocab_doc("v2", "ephemeral", "lasting a very short time",
                       partOfSpeech="adjective", translation="efimero"),
        make_vocab_doc("v3", "ubiquitous", "present everywhere",
                       partOfSpeech="adjective", synonyms=["omnipresent", "universal"]),
        make_vocab_doc("v4", "resilience", "ability to recover quickly"),
        make_vocab_doc("v5", "algorithm", "a step-by-step procedure"),
        make_vocab_doc("v6", "candor", "the quality of being open and honest"),
    ]


@pytest.fixture
def engine(test_settings, mock_cosmos_service):
    """Learning engine over the mocked store, without AI, with a seeded random source."""
    return LearningEngine(
        settings=test_settings,
        db_service=mock_cosmos_service,
        augmenter=NullQuestionAugmenter(),
        rng=random.Random(42)
    )
