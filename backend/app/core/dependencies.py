"""
FastAPI Dependencies
Dependency injection for the learning engine.
"""
import logging
from functools import lru_cache

from app.agents.orchestrator import LearningEngine
from app.config import get_settings


logger = logging.getLogger(__name__)


@lru_cache()
def get_learning_engine() -> LearningEngine:
    """
    Get the process-wide learning engine.

    Built on first use from the cached settings; the store and AI
    clients connect lazily.
    """
    settings = get_settings()
    logger.info(
        f"Building learning engine (augmentation "
        f"{'enabled' if settings.QUESTION_AUGMENTATION_ENABLED else 'disabled'})"
    )
    return LearningEngine(settings)


async def close_learning_engine() -> None:
    """Close the engine's store client if the engine was ever built."""
    if get_learning_engine.cache_info().currsize:
        await get_learning_engine().close()
        get_learning_engine.cache_clear()
