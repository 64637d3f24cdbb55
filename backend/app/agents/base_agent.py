"""
Base Agent
Abstract base class for all agents of the learning engine.
Provides common interface, logging, and store access.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, TypeVar, Generic

from app.config import Settings, get_settings
from app.services.cosmos_db_service import CosmosDBService


# Type variable for agent state
StateT = TypeVar("StateT")


class BaseAgent(ABC, Generic[StateT]):
    """
    Abstract base class for all agents.

    Each agent should:
    - Handle one part of the practice workflow (planning, recording, ...)
    - Receive its collaborators at construction
    - Log its operations for debugging
    - Return updates to the shared state when run inside the graph
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_service: CosmosDBService | None = None
    ):
        """
        Initialize base agent with services.

        Args:
            settings: Application settings (cached settings if not provided)
            db_service: Item store adapter (built from settings if not provided)
        """
        self.settings = settings or get_settings()
        self.db_service = db_service or CosmosDBService(self.settings)

        # Setup logging for this agent
        self.logger = logging.getLogger(f"agent.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Agent name for logging and identification"""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Agent description for documentation"""
        pass

    @abstractmethod
    async def process(self, state: StateT) -> StateT:
        """
        Process the current state and return updated state.

        Entry point used by the orchestrator graph.

        Args:
            state: Current shared state

        Returns:
            Updated state with agent's modifications
        """
        pass

    def log_start(self, context: dict | None = None) -> None:
        """Log agent starting to process"""
        msg = f"[{self.name}] Starting processing"
        if context:
            msg += f" - Context: {context}"
        self.logger.info(msg)

    def log_complete(self, result: Any = None) -> None:
        """Log agent completed processing"""
        msg = f"[{self.name}] Processing complete"
        if result:
            msg += f" - Result: {result}"
        self.logger.info(msg)

    def log_error(self, error: Exception, context: dict | None = None) -> None:
        """Log agent error"""
        msg = f"[{self.name}] Error: {str(error)}"
        if context:
            msg += f" - Context: {context}"
        self.logger.error(msg, exc_info=True)

    def log_debug(self, message: str, data: Any = None) -> None:
        """Log debug information"""
        msg = f"[{self.name}] {message}"
        if data:
            msg += f" - Data: {data}"
        self.logger.debug(msg)
