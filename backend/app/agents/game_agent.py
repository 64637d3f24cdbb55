"""
Game Agent
Runs quiz and matching game sessions and scores them.

Responsibilities:
- Create game sessions and finalize them exactly once
- Build quiz questions (due words first) and matching pairs
- Convert session outcomes into points
"""
import logging
import random
from datetime import date, datetime
from typing import Optional

from app.agents.base_agent import BaseAgent
from app.agents.practice_agent import PracticeAgent
from app.agents.state import PracticeState, add_agent_message
from app.config import Settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.game import (
    GameMode,
    GameQuestion,
    GameResult,
    GameSession,
    GameType,
    MatchingPairs,
    PointsConfig
)
from app.models.vocabulary import VocabularyItem, WordDifficulty
from app.services.cosmos_db_service import CosmosDBService
from app.utils.game_scoring import calculate_game_points


logger = logging.getLogger(__name__)

# Points per question used for the displayed score
SCORE_PER_QUESTION = 10

DIFFICULTY_MULTIPLIERS = {
    WordDifficulty.BEGINNER.value: 1.0,
    WordDifficulty.INTERMEDIATE.value: 1.2,
    WordDifficulty.ADVANCED.value: 1.5,
}


class GameAgent(BaseAgent[PracticeState]):
    """
    Game Agent - quiz and matching activities.

    Returns points only; crediting them to a ledger is the caller's job.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_service: CosmosDBService | None = None,
        practice_agent: PracticeAgent | None = None,
        rng: random.Random | None = None
    ):
        super().__init__(settings=settings, db_service=db_service)
        self.rng = rng or random.Random()
        self.practice_agent = practice_agent or PracticeAgent(
            settings=self.settings,
            db_service=self.db_service,
            rng=self.rng
        )
        self.points_configs = {
            GameType.QUIZ: PointsConfig.quiz_from_settings(self.settings),
            GameType.MATCHING: PointsConfig.matching_from_settings(self.settings),
        }

    @property
    def name(self) -> str:
        return "game"

    @property
    def description(self) -> str:
        return "Creates, finalizes and scores quiz and matching sessions"

    async def process(self, state: PracticeState) -> PracticeState:
        """
        Process game request.

        Handles:
        - score_game_session: Points for raw session counters
        - create_game_session: Start a new session
        - finalize_game_session: Close a session with its results
        """
        request_type = state.get("request_type")
        request_input = dict(state.get("request_input", {}))
        self.log_start({"user_id": state["user_id"], "request_type": request_type})

        if request_type == "create_game_session":
            response = await self.create_game_session(state["user_id"], **request_input)
            message = f"Created {response.game_type} session {response.id}"
        elif request_type == "finalize_game_session":
            response = await self.finalize_game_session(state["user_id"], **request_input)
            message = f"Finalized session {response.session_id}: {response.points_earned} points"
        else:
            response = self.score_game_session(**request_input)
            message = f"Scored session: {response} points"

        state["response"] = response
        state = add_agent_message(state, self.name, message)
        self.log_complete()
        return state

    def score_game_session(
        self,
        game_type: GameType | str,
        correct_count: int,
        total_count: int,
        time_spent_seconds: float,
        best_streak: int
    ) -> int:
        """
        Points for a completed session.

        Args:
            game_type: quiz or matching
            correct_count: Correct answers
            total_count: Questions or pairs
            time_spent_seconds: Total session time
            best_streak: Longest run of correct answers

        Returns:
            Points earned
        """
        config = self.points_config_for(game_type)
        return calculate_game_points(correct_count, total_count, time_spent_seconds, best_streak, config)

    def points_config_for(self, game_type: GameType | str) -> PointsConfig:
        try:
            return self.points_configs[GameType(game_type)]
        except ValueError:
            raise ValidationError(f"Unknown game type: {game_type}", field="game_type")

    # ==================== SESSION LIFECYCLE ====================

    async def create_game_session(
        self,
        user_id: str,
        game_type: GameType | str,
        mode: GameMode | str = GameMode.CLASSIC,
        theme: Optional[str] = None
    ) -> GameSession:
        """Create and store a new, unfinalized game session."""
        if not user_id:
            raise ValidationError("User id is required", field="user_id")
        try:
            game_type = GameType(game_type)
            mode = GameMode(mode)
        except ValueError as e:
            raise ValidationError(str(e), field="game_type")

        session = GameSession(
            id=f"game-{user_id}-{int(datetime.utcnow().timestamp() * 1000)}",
            user_id=user_id,
            game_type=game_type,
            mode=mode,
            theme=theme
        )
        await self.db_service.save_game_session(user_id, session.to_document())
        self.log_debug("Game session created", {"session_id": session.id})
        return session

    async def finalize_game_session(
        self,
        user_id: str,
        session_id: str,
        correct_count: int,
        total_count: int,
        time_spent_seconds: float,
        best_streak: int
    ) -> GameResult:
        """
        Close a game session with its outcome. A session can be finalized
        only once: the write is conditional on the session being unchanged
        since it was read, so a concurrent finalize loses with ValidationError.

        Returns:
            GameResult with score and points
        """
        document = await self._require_session(user_id, session_id)
        session = GameSession.from_document(document)
        if session.finalized:
            raise ValidationError(f"Game session {session_id} is already finalized", field="session_id")

        points = self.score_game_session(
            session.game_type,
            correct_count,
            total_count,
            time_spent_seconds,
            best_streak
        )
        accuracy = correct_count / total_count
        perfect = correct_count == total_count

        finalized = session.model_copy(update={
            "score": correct_count * SCORE_PER_QUESTION,
            "max_score": total_count * SCORE_PER_QUESTION,
            "accuracy": accuracy,
            "time_spent": time_spent_seconds,
            "questions_answered": total_count,
            "correct_answers": correct_count,
            "streak_achieved": best_streak,
            "points_earned": points,
            "perfect_score": perfect,
            "finalized": True,
            "finalized_at": datetime.utcnow()
        })
        try:
            await self.db_service.replace_game_session(
                user_id,
                finalized.to_document(),
                etag=document.get("_etag")
            )
        except ValidationError:
            raise ValidationError(f"Game session {session_id} is already finalized", field="session_id")

        return GameResult(
            session_id=session.id,
            user_id=user_id,
            game_type=session.game_type,
            final_score=finalized.score,
            max_score=finalized.max_score,
            accuracy=accuracy,
            time_spent=time_spent_seconds,
            questions_answered=total_count,
            correct_answers=correct_count,
            streak_achieved=best_streak,
            points_earned=points,
            perfect_score=perfect
        )

    # ==================== CONTENT ====================

    async def generate_quiz_questions(
        self,
        user_id: str,
        session_id: str,
        count: Optional[int] = None,
        today: Optional[date] = None
    ) -> list[GameQuestion]:
        """
        Build quiz questions, preferring words due for review.

        Args:
            user_id: Learner ID
            session_id: Game session the questions belong to
            count: Number of questions, defaults to the configured value
            today: Reference date, defaults to date.today()

        Raises:
            NotFoundError: If the game session does not exist
        """
        count = count or self.settings.QUIZ_QUESTIONS_PER_SESSION
        today = today or date.today()

        await self._require_session(user_id, session_id)
        accuracy = await self.practice_agent.progress_agent.get_recent_accuracy(user_id)

        documents = await self.db_service.get_vocabulary_due_for_review(user_id, today)
        if not documents:
            documents = await self.db_service.get_vocabulary(user_id)

        candidates = [VocabularyItem.from_document(doc) for doc in documents][:count * 2]
        self.rng.shuffle(candidates)

        points_value = self.points_configs[GameType.QUIZ].base_points_per_correct
        questions = []
        for item in candidates[:count]:
            question = await self.practice_agent.generate_question(item, accuracy)
            questions.append(GameQuestion(
                **question.model_dump(),
                game_session_id=session_id,
                points_value=points_value,
                difficulty_multiplier=DIFFICULTY_MULTIPLIERS.get(item.difficulty_level, 1.0)
            ))
        return questions

    async def generate_matching_pairs(
        self,
        user_id: str,
        session_id: str,
        pair_count: Optional[int] = None,
        theme: Optional[str] = None
    ) -> MatchingPairs:
        """
        Build matching pairs of words and meanings (translation first,
        then definition). Meanings on the right are shuffled.
        """
        pair_count = pair_count or self.settings.MATCHING_PAIRS_PER_SESSION
        await self._require_session(user_id, session_id)
        documents = await self.db_service.get_vocabulary(user_id)

        if theme:
            themed = [doc for doc in documents if doc.get("category") == theme]
            if len(themed) >= pair_count:
                documents = themed

        items = [VocabularyItem.from_document(doc) for doc in documents]
        self.rng.shuffle(items)

        left, answer_key, seen = [], {}, set()
        for item in items:
            meaning = item.translation or item.definition
            if not meaning or meaning.strip().lower() in seen:
                continue
            seen.add(meaning.strip().lower())
            left.append({"id": item.id, "word": item.word})
            answer_key[item.id] = meaning
            if len(left) >= pair_count:
                break

        right = list(answer_key.values())
        self.rng.shuffle(right)

        return MatchingPairs(session_id=session_id, left=left, right=right, answer_key=answer_key)

    async def _require_session(self, user_id: str, session_id: str) -> dict:
        document = await self.db_service.get_game_session(user_id, session_id)
        if document is None:
            raise NotFoundError(f"Game session {session_id} not found", resource="game_session")
        return document
