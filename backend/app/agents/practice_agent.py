"""
Practice Agent
Generates exercise questions and practice sessions.

Responsibilities:
- Pick an exercise type per word from mastery and recent accuracy
- Build questions with distractors from the learner's own vocabulary
- Use AI-generated questions when available, filling gaps locally
"""
import logging
import random
from datetime import datetime
from typing import Optional

from app.agents.base_agent import BaseAgent
from app.agents.progress_agent import ProgressAgent
from app.agents.state import PracticeState, add_agent_message
from app.config import Settings
from app.core.exceptions import AugmentationUnavailable, NotFoundError, ValidationError
from app.models.vocabulary import (
    ExerciseQuestion,
    PracticeSession,
    PracticeSessionType,
    VocabularyItem
)
from app.services.cosmos_db_service import CosmosDBService
from app.services.question_augmenter import NullQuestionAugmenter, QuestionAugmenter
from app.utils.exercise_generator import ExerciseGenerator


logger = logging.getLogger(__name__)


class PracticeAgent(BaseAgent[PracticeState]):
    """
    Practice Agent - serves exercise questions.

    The augmenter is best-effort: its failures are logged and every item
    without a usable AI question gets a locally generated one.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_service: CosmosDBService | None = None,
        generator: ExerciseGenerator | None = None,
        augmenter: QuestionAugmenter | None = None,
        progress_agent: ProgressAgent | None = None,
        rng: random.Random | None = None
    ):
        super().__init__(settings=settings, db_service=db_service)
        self.rng = rng or random.Random()
        self.generator = generator or ExerciseGenerator(
            max_distractors=self.settings.EXERCISE_MAX_DISTRACTORS,
            rng=self.rng
        )
        self.augmenter = augmenter or NullQuestionAugmenter()
        self.progress_agent = progress_agent or ProgressAgent(
            settings=self.settings,
            db_service=self.db_service
        )

    @property
    def name(self) -> str:
        return "practice"

    @property
    def description(self) -> str:
        return "Generates adaptive vocabulary exercise questions and sessions"

    async def process(self, state: PracticeState) -> PracticeState:
        """
        Process practice request.

        Handles:
        - generate_question: One question for one item
        - create_practice_session: Questions for a list of items
        """
        request_type = state.get("request_type")
        request_input = state.get("request_input", {})
        self.log_start({"user_id": state["user_id"], "request_type": request_type})

        if request_type == "create_practice_session":
            session = await self.create_practice_session(
                state["user_id"],
                request_input["items"],
                session_type=request_input.get("session_type", PracticeSessionType.DAILY_REVIEW),
                use_ai=request_input.get("use_ai", True)
            )
            state["response"] = session
            message = f"Created session with {session.total_questions} questions"
        else:
            question = await self.generate_question(
                request_input["item"],
                request_input.get("recent_accuracy")
            )
            state["response"] = question
            message = f"Generated {question.type} question for '{question.word}'"

        state = add_agent_message(state, self.name, message)
        self.log_complete()
        return state

    async def generate_question(
        self,
        item: VocabularyItem,
        recent_accuracy: Optional[float] = None
    ) -> ExerciseQuestion:
        """
        Generate one adaptive question for a vocabulary item.

        Args:
            item: Target vocabulary item
            recent_accuracy: Learner's recent accuracy (0-1), defaults to
                the configured value

        Returns:
            ExerciseQuestion
        """
        if recent_accuracy is None:
            recent_accuracy = self.settings.DEFAULT_RECENT_ACCURACY

        pool = await self._distractor_pool(item)
        return self.generator.generate_adaptive(item, recent_accuracy, pool)

    async def load_items(self, user_id: str, vocabulary_ids: list[str]) -> list[VocabularyItem]:
        """Load vocabulary items by id, keeping the given order."""
        items = []
        for vocabulary_id in vocabulary_ids:
            document = await self.db_service.get_vocabulary_item(user_id, vocabulary_id)
            if document is None:
                raise NotFoundError(f"Vocabulary item {vocabulary_id} not found", resource="vocabulary")
            items.append(VocabularyItem.from_document(document))
        return items

    async def generate_question_for_id(
        self,
        user_id: str,
        vocabulary_id: str,
        recent_accuracy: Optional[float] = None
    ) -> ExerciseQuestion:
        """Load an item by id, then generate a question for it."""
        items = await self.load_items(user_id, [vocabulary_id])
        return await self.generate_question(items[0], recent_accuracy)

    async def create_practice_session(
        self,
        user_id: str,
        items: list[VocabularyItem],
        session_type: PracticeSessionType | str = PracticeSessionType.DAILY_REVIEW,
        use_ai: bool = True
    ) -> PracticeSession:
        """
        Create a practice session with one question per distinct word.

        Args:
            user_id: Learner ID
            items: Vocabulary items to practice
            session_type: daily-review, intensive-practice or weak-points
            use_ai: Ask the augmenter before generating locally

        Returns:
            PracticeSession with shuffled questions
        """
        if not user_id:
            raise ValidationError("User id is required", field="user_id")
        try:
            session_type = PracticeSessionType(session_type)
        except ValueError:
            raise ValidationError(f"Unknown session type: {session_type}", field="session_type")

        # One entry per word, first occurrence wins
        unique_items: dict[str, VocabularyItem] = {}
        for item in items:
            unique_items.setdefault(item.word.strip().lower(), item)

        questions: dict[str, ExerciseQuestion] = {}
        if use_ai and unique_items:
            questions = await self._augmented_questions(list(unique_items.values()))
        generated_by_ai = bool(questions)

        missing = [item for key, item in unique_items.items() if key not in questions]
        if missing:
            accuracy = await self.progress_agent.get_recent_accuracy(user_id)
            for item in missing:
                questions[item.word.strip().lower()] = await self.generate_question(item, accuracy)

        ordered = list(questions.values())
        self.rng.shuffle(ordered)

        self.log_debug("Practice session built", {
            "questions": len(ordered),
            "ai_questions": len(unique_items) - len(missing)
        })

        return PracticeSession(
            id=f"session-{user_id}-{int(datetime.utcnow().timestamp() * 1000)}",
            user_id=user_id,
            questions=ordered,
            total_questions=len(ordered),
            session_type=session_type,
            generated_by_ai=generated_by_ai
        )

    async def _augmented_questions(self, items: list[VocabularyItem]) -> dict[str, ExerciseQuestion]:
        """Valid AI questions keyed by lower-cased word, at most one per word."""
        try:
            candidates = await self.augmenter.generate_questions(items)
        except AugmentationUnavailable as e:
            self.logger.warning(f"[{self.name}] Question augmentation unavailable, using local generator: {e}")
            return {}

        by_word = {item.word.strip().lower(): item for item in items}
        accepted: dict[str, ExerciseQuestion] = {}
        for question in candidates:
            key = question.word.strip().lower()
            item = by_word.get(key)
            if item is None or key in accepted:
                continue
            options = self._contract_options(question)
            if options is None:
                continue
            accepted[key] = question.model_copy(update={
                "vocabulary_id": item.id,
                "options": options,
                "generated_by_ai": True
            })
        return accepted

    def _contract_options(self, question: ExerciseQuestion) -> Optional[list[str]]:
        """
        Reduce AI options to the correct answer plus at most max_distractors
        distinct distractors, compared case-insensitively. None when the
        correct answer is missing or repeated, or no distractor is left.
        """
        correct = question.correct_answer.strip().lower()
        if sum(1 for option in question.options if option.strip().lower() == correct) != 1:
            return None

        options, seen, distractors = [], set(), 0
        for option in question.options:
            normalized = option.strip().lower()
            if not normalized or normalized in seen:
                continue
            if normalized != correct:
                if distractors >= self.generator.max_distractors:
                    continue
                distractors += 1
            seen.add(normalized)
            options.append(option)

        return options if distractors else None

    async def _distractor_pool(self, item: VocabularyItem) -> list[VocabularyItem]:
        documents = await self.db_service.get_distractor_pool(
            item.user_id,
            exclude_id=item.id,
            limit=self.settings.DISTRACTOR_POOL_SIZE
        )
        return [VocabularyItem.from_document(doc) for doc in documents]
