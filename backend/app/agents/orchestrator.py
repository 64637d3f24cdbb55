"""
Orchestrator Agent
Central coordinator for the learning engine using LangGraph.

Responsibilities:
- Route engine requests to the agent that owns them
- Manage agent workflow and state transitions
- Expose the engine operations through the LearningEngine facade
"""
import logging
import random
from datetime import date
from typing import Any, Literal, Optional

from langgraph.graph import StateGraph, END

from app.agents.base_agent import BaseAgent
from app.agents.game_agent import GameAgent
from app.agents.practice_agent import PracticeAgent
from app.agents.progress_agent import ProgressAgent
from app.agents.scheduler_agent import SchedulerAgent
from app.agents.state import (
    PracticeState,
    RequestType,
    create_initial_state,
    add_agent_message
)
from app.agents.vocabulary_agent import VocabularyAgent
from app.config import Settings, get_settings
from app.models.game import GameMode, GameQuestion, GameResult, GameSession, GameType, MatchingPairs
from app.models.vocabulary import (
    AnswerOutcome,
    DailyPractice,
    ExerciseQuestion,
    ExerciseType,
    LearningStats,
    PracticeSession,
    PracticeSessionType,
    VocabularyItem
)
from app.services.azure_openai_service import AzureOpenAIService
from app.services.cosmos_db_service import CosmosDBService
from app.services.question_augmenter import QuestionAugmenter, build_question_augmenter
from app.utils.srs_algorithm import SRSAlgorithm, SRSConfig


logger = logging.getLogger(__name__)


# Define route types for type safety
RouteType = Literal[
    "scheduler",
    "practice",
    "vocabulary",
    "progress",
    "game",
    "complete"
]

ROUTES: dict[str, RouteType] = {
    "plan_daily_practice": "scheduler",
    "generate_question": "practice",
    "create_practice_session": "practice",
    "record_answer": "vocabulary",
    "rebuild_item_state": "vocabulary",
    "get_learning_stats": "progress",
    "score_game_session": "game",
    "create_game_session": "game",
    "finalize_game_session": "game",
}


class Orchestrator(BaseAgent[PracticeState]):
    """
    Orchestrator Agent - Central coordinator for all agents.

    Uses LangGraph to define the request workflow:
    START -> router -> [agent node] -> finalize -> END
    """

    def __init__(
        self,
        scheduler_agent: SchedulerAgent,
        practice_agent: PracticeAgent,
        vocabulary_agent: VocabularyAgent,
        progress_agent: ProgressAgent,
        game_agent: GameAgent,
        settings: Settings | None = None
    ):
        super().__init__(settings=settings, db_service=scheduler_agent.db_service)
        self.agents: dict[str, BaseAgent] = {
            "scheduler": scheduler_agent,
            "practice": practice_agent,
            "vocabulary": vocabulary_agent,
            "progress": progress_agent,
            "game": game_agent,
        }
        self.graph = self._build_graph()
        self.compiled_graph = self.graph.compile()

    @property
    def name(self) -> str:
        return "orchestrator"

    @property
    def description(self) -> str:
        return "Routes engine requests to agents and manages workflow execution"

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph workflow."""
        graph = StateGraph(PracticeState)

        graph.add_node("router", self._router_node)
        for route, agent in self.agents.items():
            graph.add_node(route, agent.process)
        graph.add_node("finalize", self._finalize_node)

        graph.set_entry_point("router")

        graph.add_conditional_edges(
            "router",
            self._route_decision,
            {**{route: route for route in self.agents}, "complete": "finalize"}
        )

        for route in self.agents:
            graph.add_edge(route, "finalize")

        graph.add_edge("finalize", END)

        return graph

    async def process(self, state: PracticeState) -> PracticeState:
        """
        Process a request through the agent workflow.

        Engine errors raised by an agent propagate to the caller.
        """
        self.log_start({
            "request_type": state.get("request_type"),
            "user_id": state.get("user_id")
        })

        try:
            final_state = await self.compiled_graph.ainvoke(state)
        except Exception as e:
            self.log_error(e, {"request_id": state.get("request_id")})
            raise

        self.log_complete({"route": final_state.get("route_decision")})
        return final_state

    async def run(
        self,
        user_id: str,
        request_type: RequestType,
        request_input: dict | None = None
    ) -> Any:
        """
        Run one engine request and return the handling agent's response.

        Args:
            user_id: Learner the request is for
            request_type: Engine operation
            request_input: Operation arguments

        Returns:
            The response model produced by the agent
        """
        state = create_initial_state(user_id, request_type, request_input)
        final_state = await self.process(state)
        return final_state.get("response")

    # ==================== ROUTER NODE ====================

    async def _router_node(self, state: PracticeState) -> PracticeState:
        """Router node - decides which agent to invoke."""
        request_type = state.get("request_type", "")
        self.log_debug("Router processing", {"request_type": request_type})

        route = ROUTES.get(request_type, "complete")
        state["route_decision"] = route
        if route == "complete":
            self.logger.warning(f"[{self.name}] Unknown request type: {request_type}")

        return add_agent_message(state, self.name, f"Routing to: {route}")

    def _route_decision(self, state: PracticeState) -> RouteType:
        """Get routing decision from state"""
        return state.get("route_decision") or "complete"

    async def _finalize_node(self, state: PracticeState) -> PracticeState:
        """Finalize node - marks processing as complete."""
        state["is_complete"] = True
        return add_agent_message(state, self.name, "Processing complete")


class LearningEngine:
    """
    Entry point of the learning engine.

    Builds the agents once from explicit configuration and routes every
    store-backed operation through the orchestrator graph.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_service: CosmosDBService | None = None,
        augmenter: QuestionAugmenter | None = None,
        srs: SRSAlgorithm | None = None,
        rng: random.Random | None = None
    ):
        self.settings = settings or get_settings()
        self.db_service = db_service or CosmosDBService(self.settings)
        self.srs = srs or SRSAlgorithm(SRSConfig.from_settings(self.settings))
        rng = rng or random.Random()
        augmenter = augmenter or build_question_augmenter(
            self.settings.QUESTION_AUGMENTATION_ENABLED,
            AzureOpenAIService(self.settings)
        )

        self.progress_agent = ProgressAgent(self.settings, self.db_service, srs=self.srs)
        self.scheduler_agent = SchedulerAgent(self.settings, self.db_service, srs=self.srs)
        self.practice_agent = PracticeAgent(
            self.settings,
            self.db_service,
            augmenter=augmenter,
            progress_agent=self.progress_agent,
            rng=rng
        )
        self.vocabulary_agent = VocabularyAgent(self.settings, self.db_service, srs=self.srs)
        self.game_agent = GameAgent(
            self.settings,
            self.db_service,
            practice_agent=self.practice_agent,
            rng=rng
        )
        self.orchestrator = Orchestrator(
            scheduler_agent=self.scheduler_agent,
            practice_agent=self.practice_agent,
            vocabulary_agent=self.vocabulary_agent,
            progress_agent=self.progress_agent,
            game_agent=self.game_agent,
            settings=self.settings
        )

    # ==================== PRACTICE ====================

    async def plan_daily_practice(
        self,
        user_id: str,
        target_count: Optional[int] = None,
        today: Optional[date] = None
    ) -> DailyPractice:
        return await self.orchestrator.run(user_id, "plan_daily_practice", {
            "target_count": target_count or self.settings.DAILY_PRACTICE_TARGET_COUNT,
            "today": today
        })

    async def generate_question(
        self,
        item: VocabularyItem,
        recent_accuracy: Optional[float] = None
    ) -> ExerciseQuestion:
        return await self.orchestrator.run(item.user_id, "generate_question", {
            "item": item,
            "recent_accuracy": recent_accuracy
        })

    async def generate_question_for_id(
        self,
        user_id: str,
        vocabulary_id: str,
        recent_accuracy: Optional[float] = None
    ) -> ExerciseQuestion:
        return await self.practice_agent.generate_question_for_id(user_id, vocabulary_id, recent_accuracy)

    async def load_vocabulary_items(self, user_id: str, vocabulary_ids: list[str]) -> list[VocabularyItem]:
        return await self.practice_agent.load_items(user_id, vocabulary_ids)

    async def create_practice_session(
        self,
        user_id: str,
        items: list[VocabularyItem],
        session_type: PracticeSessionType | str = PracticeSessionType.DAILY_REVIEW,
        use_ai: bool = True
    ) -> PracticeSession:
        return await self.orchestrator.run(user_id, "create_practice_session", {
            "items": items,
            "session_type": session_type,
            "use_ai": use_ai
        })

    async def record_answer(
        self,
        user_id: str,
        question_id: str,
        vocabulary_id: str,
        submitted_answer: str,
        correct_answer: str,
        response_time_seconds: float,
        difficulty_rating: Optional[int] = None,
        exercise_type: Optional[ExerciseType | str] = None,
        today: Optional[date] = None
    ) -> AnswerOutcome:
        return await self.orchestrator.run(user_id, "record_answer", {
            "question_id": question_id,
            "vocabulary_id": vocabulary_id,
            "submitted_answer": submitted_answer,
            "correct_answer": correct_answer,
            "response_time_seconds": response_time_seconds,
            "difficulty_rating": difficulty_rating,
            "exercise_type": exercise_type,
            "today": today
        })

    async def rebuild_item_state(self, user_id: str, vocabulary_id: str) -> VocabularyItem:
        return await self.orchestrator.run(user_id, "rebuild_item_state", {
            "vocabulary_id": vocabulary_id
        })

    async def get_learning_stats(self, user_id: str, today: Optional[date] = None) -> LearningStats:
        return await self.orchestrator.run(user_id, "get_learning_stats", {"today": today})

    # ==================== GAMES ====================

    async def score_game_session(
        self,
        game_type: GameType | str,
        correct_count: int,
        total_count: int,
        time_spent_seconds: float,
        best_streak: int
    ) -> int:
        return await self.orchestrator.run("", "score_game_session", {
            "game_type": game_type,
            "correct_count": correct_count,
            "total_count": total_count,
            "time_spent_seconds": time_spent_seconds,
            "best_streak": best_streak
        })

    async def create_game_session(
        self,
        user_id: str,
        game_type: GameType | str,
        mode: GameMode | str = GameMode.CLASSIC,
        theme: Optional[str] = None
    ) -> GameSession:
        return await self.orchestrator.run(user_id, "create_game_session", {
            "game_type": game_type,
            "mode": mode,
            "theme": theme
        })

    async def finalize_game_session(
        self,
        user_id: str,
        session_id: str,
        correct_count: int,
        total_count: int,
        time_spent_seconds: float,
        best_streak: int
    ) -> GameResult:
        return await self.orchestrator.run(user_id, "finalize_game_session", {
            "session_id": session_id,
            "correct_count": correct_count,
            "total_count": total_count,
            "time_spent_seconds": time_spent_seconds,
            "best_streak": best_streak
        })

    async def generate_quiz_questions(
        self,
        user_id: str,
        session_id: str,
        count: Optional[int] = None
    ) -> list[GameQuestion]:
        return await self.game_agent.generate_quiz_questions(user_id, session_id, count)

    async def generate_matching_pairs(
        self,
        user_id: str,
        session_id: str,
        pair_count: Optional[int] = None,
        theme: Optional[str] = None
    ) -> MatchingPairs:
        return await self.game_agent.generate_matching_pairs(user_id, session_id, pair_count, theme)

    async def close(self):
        """Release the store client."""
        await self.db_service.close()
