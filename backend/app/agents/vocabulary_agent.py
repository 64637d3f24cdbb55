"""
Vocabulary Agent
Records answers to vocabulary exercises and reschedules the items.

Responsibilities:
- Check answers and rate the performance (0-5)
- Apply the SM-2 update and the mastery transition rule
- Append practice records and write back the item
- Rebuild an item's learning state from its practice log
"""
import logging
from datetime import date, datetime
from typing import Optional

from app.agents.base_agent import BaseAgent
from app.agents.state import PracticeState, add_agent_message
from app.config import Settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.vocabulary import (
    AnswerOutcome,
    ExerciseType,
    MasteryLevel,
    PracticeRecord,
    VocabularyItem
)
from app.services.cosmos_db_service import CosmosDBService
from app.utils.exercise_generator import exercise_type_from_question_id
from app.utils.srs_algorithm import SRSAlgorithm, SRSConfig


logger = logging.getLogger(__name__)


def check_answer(submitted_answer: str, correct_answer: str) -> bool:
    """Trimmed, case-insensitive comparison."""
    return (submitted_answer or "").strip().lower() == (correct_answer or "").strip().lower()


def next_mastery_level(current: int, performance_rating: int, previous_repetitions: int) -> int:
    """
    Mastery transition for one answer.

    Mastered needs a rating of 4+ after at least 3 consecutive successes
    (counted before this answer). Learning needs any success. The level
    never goes down.
    """
    if performance_rating >= 4 and previous_repetitions >= 3:
        candidate = MasteryLevel.MASTERED
    elif performance_rating >= 3:
        candidate = MasteryLevel.LEARNING
    else:
        candidate = current
    return max(int(current), int(candidate))


def record_id_for(user_id: str, question_id: str) -> str:
    """Deterministic practice record id for one answered question."""
    return f"record_{user_id}_{question_id}"


class VocabularyAgent(BaseAgent[PracticeState]):
    """
    Vocabulary Agent - records answers and keeps SRS state current.

    Writes the practice record before the item. With a deterministic
    record id and the item's last_record_id, a retried call after any
    failure applies the answer exactly once.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_service: CosmosDBService | None = None,
        srs: SRSAlgorithm | None = None
    ):
        super().__init__(settings=settings, db_service=db_service)
        self.srs = srs or SRSAlgorithm(SRSConfig.from_settings(self.settings))

    @property
    def name(self) -> str:
        return "vocabulary"

    @property
    def description(self) -> str:
        return "Records vocabulary answers and updates spaced repetition state"

    async def process(self, state: PracticeState) -> PracticeState:
        """
        Process vocabulary request.

        Handles:
        - record_answer: Apply one submitted answer
        - rebuild_item_state: Replay an item's practice log
        """
        request_type = state.get("request_type")
        request_input = dict(state.get("request_input", {}))
        self.log_start({"user_id": state["user_id"], "request_type": request_type})

        if request_type == "rebuild_item_state":
            item = await self.rebuild_item_state(
                state["user_id"],
                request_input["vocabulary_id"]
            )
            state["response"] = item
            message = f"Rebuilt learning state of '{item.word}'"
        else:
            outcome = await self.record_answer(user_id=state["user_id"], **request_input)
            state["response"] = outcome
            message = (
                f"Recorded {'correct' if outcome.is_correct else 'incorrect'} answer, "
                f"next review {outcome.next_review_date}"
            )

        state = add_agent_message(state, self.name, message)
        self.log_complete()
        return state

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
        """
        Record one answer and reschedule the vocabulary item.

        Args:
            user_id: Learner ID
            question_id: ID of the answered question
            vocabulary_id: ID of the vocabulary item
            submitted_answer: Learner's answer
            correct_answer: Expected answer
            response_time_seconds: Time taken to answer
            difficulty_rating: Learner-reported difficulty (0-5), optional
            exercise_type: Question type, derived from question_id if omitted
            today: Reference date, defaults to date.today()

        Returns:
            AnswerOutcome with the new scheduling state
        """
        # Validation happens before any store access
        if not user_id:
            raise ValidationError("User id is required", field="user_id")
        if not question_id:
            raise ValidationError("Question id is required", field="question_id")
        if not vocabulary_id:
            raise ValidationError("Vocabulary id is required", field="vocabulary_id")
        if correct_answer is None or not str(correct_answer).strip():
            raise ValidationError("Correct answer is required", field="correct_answer")

        exercise_type = self._resolve_exercise_type(question_id, exercise_type)
        is_correct = check_answer(submitted_answer, correct_answer)
        performance_rating = self.srs.calculate_performance_rating(
            is_correct,
            response_time_seconds,
            user_difficulty=difficulty_rating
        )
        today = today or date.today()
        record_id = record_id_for(user_id, question_id)

        document = await self.db_service.get_vocabulary_item(user_id, vocabulary_id)
        if document is None:
            raise NotFoundError(f"Vocabulary item {vocabulary_id} not found", resource="vocabulary")
        item = VocabularyItem.from_document(document)

        if item.last_record_id == record_id:
            self.log_debug("Answer already applied", {"record_id": record_id})
            return await self._stored_outcome(user_id, item, record_id, is_correct, performance_rating)

        result = self.srs.calculate(
            item.ease_factor,
            item.interval,
            item.repetitions,
            performance_rating,
            today=today
        )
        new_mastery = next_mastery_level(item.mastery_level, performance_rating, item.repetitions)

        record = PracticeRecord(
            id=record_id,
            user_id=user_id,
            vocabulary_id=vocabulary_id,
            question_id=question_id,
            exercise_type=exercise_type,
            user_answer=submitted_answer or "",
            correct_answer=correct_answer,
            is_correct=is_correct,
            response_time=response_time_seconds,
            difficulty_rating=difficulty_rating,
            performance_rating=performance_rating
        )

        updated = item.model_copy(update={
            "ease_factor": result.ease_factor,
            "interval": result.interval,
            "repetitions": result.repetitions,
            "next_review": result.next_review,
            "total_reviews": item.total_reviews + 1,
            "correct_reviews": item.correct_reviews + (1 if is_correct else 0),
            "mastery_level": new_mastery,
            "last_reviewed": datetime.utcnow(),
            "last_record_id": record_id
        })

        # Record first, then item
        await self.db_service.save_practice_record(user_id, record.to_document())
        await self.db_service.save_vocabulary_item(user_id, self._item_document(document, updated))

        self.log_debug("Answer recorded", {
            "vocabulary_id": vocabulary_id,
            "rating": performance_rating,
            "interval": result.interval
        })

        return AnswerOutcome(
            vocabulary_id=vocabulary_id,
            record_id=record_id,
            is_correct=is_correct,
            performance_rating=performance_rating,
            new_mastery_level=new_mastery,
            next_review_date=result.next_review,
            interval=result.interval,
            ease_factor=result.ease_factor,
            repetitions=result.repetitions
        )

    async def rebuild_item_state(self, user_id: str, vocabulary_id: str) -> VocabularyItem:
        """
        Recompute an item's learning state by replaying its practice records.

        Starts from the default state and applies every record in creation
        order. Running it twice gives the same result.

        Returns:
            The persisted VocabularyItem
        """
        document = await self.db_service.get_vocabulary_item(user_id, vocabulary_id)
        if document is None:
            raise NotFoundError(f"Vocabulary item {vocabulary_id} not found", resource="vocabulary")
        item = VocabularyItem.from_document(document)

        records = [
            PracticeRecord.from_document(doc)
            for doc in await self.db_service.get_practice_records(user_id, vocabulary_id)
        ]
        records.sort(key=lambda record: record.created_at)

        ease_factor = self.srs.config.initial_ease_factor
        interval = 0
        repetitions = 0
        next_review = None
        mastery = int(MasteryLevel.NEW)
        correct_reviews = 0
        last_reviewed = None
        last_record_id = None

        for record in records:
            result = self.srs.calculate(
                ease_factor,
                interval,
                repetitions,
                record.performance_rating,
                today=record.created_at.date()
            )
            mastery = next_mastery_level(mastery, record.performance_rating, repetitions)
            ease_factor = result.ease_factor
            interval = result.interval
            repetitions = result.repetitions
            next_review = result.next_review
            correct_reviews += 1 if record.is_correct else 0
            last_reviewed = record.created_at
            last_record_id = record.id

        rebuilt = item.model_copy(update={
            "ease_factor": ease_factor,
            "interval": interval,
            "repetitions": repetitions,
            "next_review": next_review,
            "total_reviews": len(records),
            "correct_reviews": correct_reviews,
            "mastery_level": max(mastery, int(item.mastery_level)),
            "last_reviewed": last_reviewed,
            "last_record_id": last_record_id
        })

        await self.db_service.save_vocabulary_item(user_id, self._item_document(document, rebuilt))
        self.log_debug("Item rebuilt", {"vocabulary_id": vocabulary_id, "records": len(records)})
        return rebuilt

    def _resolve_exercise_type(
        self,
        question_id: str,
        exercise_type: Optional[ExerciseType | str]
    ) -> ExerciseType:
        if exercise_type:
            try:
                return ExerciseType(exercise_type)
            except ValueError:
                raise ValidationError(f"Unknown exercise type: {exercise_type}", field="exercise_type")

        derived = exercise_type_from_question_id(question_id)
        if derived is None:
            raise ValidationError(
                "Exercise type is missing and cannot be derived from the question id",
                field="exercise_type"
            )
        return derived

    async def _stored_outcome(
        self,
        user_id: str,
        item: VocabularyItem,
        record_id: str,
        is_correct: bool,
        performance_rating: int
    ) -> AnswerOutcome:
        """Outcome of an answer that was already applied to the item."""
        stored = await self.db_service.get_practice_record(user_id, record_id)
        if stored is not None:
            record = PracticeRecord.from_document(stored)
            is_correct = record.is_correct
            performance_rating = record.performance_rating

        return AnswerOutcome(
            vocabulary_id=item.id,
            record_id=record_id,
            is_correct=is_correct,
            performance_rating=performance_rating,
            new_mastery_level=item.mastery_level,
            next_review_date=item.next_review,
            interval=item.interval,
            ease_factor=item.ease_factor,
            repetitions=item.repetitions,
            already_recorded=True
        )

    def _item_document(self, original: dict, item: VocabularyItem) -> dict:
        """Merge the updated model over the stored document, keeping unknown keys."""
        document = dict(original)
        document.update(item.to_document())
        return document
