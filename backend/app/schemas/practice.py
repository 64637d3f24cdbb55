"""
Practice Schemas
Request and response schemas for practice API endpoints.
"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from app.models.vocabulary import (
    DailyPractice,
    ExerciseType,
    PracticeSessionType,
    VocabularyItem
)


# ==================== REQUEST SCHEMAS ====================

class QuestionRequest(BaseModel):
    """Request for one exercise question."""
    user_id: str = Field(..., min_length=1, description="User ID")
    vocabulary_id: str = Field(..., min_length=1, description="Vocabulary item to practice")
    recent_accuracy: Optional[float] = Field(
        default=None,
        description="Learner's recent accuracy (0-1); configured default if omitted"
    )


class PracticeSessionRequest(BaseModel):
    """Request for a practice session over several items."""
    user_id: str = Field(..., min_length=1, description="User ID")
    vocabulary_ids: list[str] = Field(..., min_length=1, description="Vocabulary items to practice")
    session_type: PracticeSessionType = Field(default=PracticeSessionType.DAILY_REVIEW)
    use_ai: bool = Field(default=True, description="Try AI-generated questions first")


class AnswerRequest(BaseModel):
    """Request to record an answer to an exercise question."""
    user_id: str = Field(..., description="User ID")
    question_id: str = Field(..., description="Question ID from the exercise")
    vocabulary_id: str = Field(..., description="Vocabulary item being answered")
    submitted_answer: str = Field(..., description="Learner's answer")
    correct_answer: str = Field(..., description="Expected answer from the question")
    response_time_seconds: float = Field(..., description="Seconds taken to answer")
    difficulty_rating: Optional[int] = Field(
        default=None,
        description="Learner-reported difficulty (0 very easy - 5 very hard)"
    )
    exercise_type: Optional[ExerciseType] = Field(
        default=None,
        description="Question type; derived from question_id when omitted"
    )


# ==================== RESPONSE SCHEMAS ====================

class WordSummary(BaseModel):
    """Vocabulary item as shown in a practice plan."""
    id: str
    word: str
    definition: str = ""
    translation: Optional[str] = None
    part_of_speech: Optional[str] = None
    mastery_level: int = 0
    next_review: Optional[date] = None

    @classmethod
    def from_item(cls, item: VocabularyItem) -> "WordSummary":
        return cls(
            id=item.id,
            word=item.word,
            definition=item.definition,
            translation=item.translation,
            part_of_speech=item.part_of_speech,
            mastery_level=int(item.mastery_level),
            next_review=item.next_review
        )


class DailyPracticeResponse(BaseModel):
    """Today's practice plan."""
    user_id: str
    date: date
    review_words: list[WordSummary] = Field(default_factory=list)
    new_words: list[WordSummary] = Field(default_factory=list)
    total_target: int
    completed: int = 0
    is_completed: bool = False

    @classmethod
    def from_plan(cls, plan: DailyPractice) -> "DailyPracticeResponse":
        return cls(
            user_id=plan.user_id,
            date=plan.date,
            review_words=[WordSummary.from_item(item) for item in plan.review_words],
            new_words=[WordSummary.from_item(item) for item in plan.new_words],
            total_target=plan.total_target,
            completed=plan.completed,
            is_completed=plan.is_completed
        )


class ItemStateResponse(BaseModel):
    """Learning state of one vocabulary item."""
    id: str
    word: str
    mastery_level: int
    ease_factor: float
    interval: int
    repetitions: int
    next_review: Optional[date] = None
    total_reviews: int
    correct_reviews: int

    @classmethod
    def from_item(cls, item: VocabularyItem) -> "ItemStateResponse":
        return cls(
            id=item.id,
            word=item.word,
            mastery_level=int(item.mastery_level),
            ease_factor=item.ease_factor,
            interval=item.interval,
            repetitions=item.repetitions,
            next_review=item.next_review,
            total_reviews=item.total_reviews,
            correct_reviews=item.correct_reviews
        )
