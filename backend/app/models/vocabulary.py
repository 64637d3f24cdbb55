"""
Vocabulary Models
Defines vocabulary items, exercise questions, practice records and daily plans.

Store documents use camelCase keys; models expose snake_case attributes.
Use ``from_document`` / ``to_document`` at the store boundary.
"""
import json
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class MasteryLevel(IntEnum):
    """Learner-facing progress tier of a vocabulary item"""
    NEW = 0
    LEARNING = 1
    MASTERED = 2


class WordDifficulty(str, Enum):
    """Word difficulty tier"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class VocabularySource(str, Enum):
    """Where the item was first encountered"""
    CONVERSATION = "conversation"
    MANUAL = "manual"
    SYSTEM = "system"


class ExerciseType(str, Enum):
    """Exercise question types"""
    WORD_MEANING_MATCH = "word-meaning-match"
    MEANING_WORD_MATCH = "meaning-word-match"
    SENTENCE_COMPLETION = "sentence-completion"
    SYNONYM_MATCH = "synonym-match"
    CONTEXT_USAGE = "context-usage"


class PracticeSessionType(str, Enum):
    """Kind of practice session"""
    DAILY_REVIEW = "daily-review"
    INTENSIVE_PRACTICE = "intensive-practice"
    WEAK_POINTS = "weak-points"


def normalize_word_list(value: Any) -> list[str]:
    """
    Normalize a synonym/antonym field into an ordered list of strings.

    Stored values may be a list, JSON-encoded text, a comma or semicolon
    separated string, or missing entirely.
    """
    if value is None:
        return []

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                value = text.strip("[]").split(",")
        else:
            separator = ";" if ";" in text and "," not in text else ","
            value = text.split(separator)

    if not isinstance(value, (list, tuple)):
        value = [value]

    words = []
    for entry in value:
        if entry is None:
            continue
        entry = str(entry).strip().strip('"').strip("'").strip()
        if entry:
            words.append(entry)
    return words


def _coerce_date(value: Any) -> Any:
    """Accept ISO datetimes for date fields by keeping the date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        return value[:10]
    return value


class StoreModel(BaseModel):
    """Base for models persisted as camelCase documents"""

    @classmethod
    def from_document(cls, document: dict):
        """Build a model from a store document."""
        return cls.model_validate(document)

    def to_document(self) -> dict:
        """Serialize to a JSON-compatible store document."""
        return self.model_dump(by_alias=True, mode="json")

    class Config:
        populate_by_name = True
        use_enum_values = True
        validate_default = True


class VocabularyItem(StoreModel):
    """One learnable vocabulary unit with its scheduling state"""
    id: str
    user_id: str = Field(..., alias="userId")
    word: str

    # Content
    definition: str = ""
    translation: Optional[str] = None
    phonetic: Optional[str] = None
    pronunciation: Optional[str] = None
    part_of_speech: Optional[str] = Field(default=None, alias="partOfSpeech")
    example: str = ""
    synonyms: list[str] = Field(default_factory=list)
    antonyms: list[str] = Field(default_factory=list)
    difficulty_level: WordDifficulty = Field(default=WordDifficulty.BEGINNER, alias="difficultyLevel")
    usage_notes: Optional[str] = Field(default=None, alias="usageNotes")
    source: VocabularySource = VocabularySource.MANUAL

    # Learning state
    mastery_level: MasteryLevel = Field(default=MasteryLevel.NEW, alias="masteryLevel")
    ease_factor: float = Field(default=2.5, ge=1.3, le=3.0, alias="easeFactor")
    interval: int = Field(default=0, ge=0, description="Days until next review")
    repetitions: int = Field(default=0, ge=0, description="Consecutive successful reviews")
    next_review: Optional[date] = Field(default=None, alias="nextReview")
    total_reviews: int = Field(default=0, ge=0, alias="totalReviews")
    correct_reviews: int = Field(default=0, ge=0, alias="correctReviews")

    # Bookkeeping
    bookmarked: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")
    last_reviewed: Optional[datetime] = Field(default=None, alias="lastReviewed")
    last_record_id: Optional[str] = Field(default=None, alias="lastRecordId")

    @field_validator("synonyms", "antonyms", mode="before")
    @classmethod
    def _normalize_lists(cls, value):
        return normalize_word_list(value)

    @field_validator("next_review", mode="before")
    @classmethod
    def _normalize_next_review(cls, value):
        return _coerce_date(value)

    @field_validator("definition", "example", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @property
    def meaning(self) -> str:
        """Definition, falling back to the translation."""
        return self.definition or self.translation or ""

    @property
    def accuracy(self) -> float:
        """Share of correct reviews for this item."""
        if not self.total_reviews:
            return 0.0
        return self.correct_reviews / self.total_reviews


class ExerciseQuestion(BaseModel):
    """An exercise question generated for one practice turn. Not persisted."""
    id: str
    type: ExerciseType
    vocabulary_id: str
    word: str
    question: str
    options: list[str]
    correct_answer: str
    explanation: Optional[str] = None
    generated_by_ai: bool = False

    class Config:
        use_enum_values = True


class PracticeRecord(StoreModel):
    """Append-only log entry for one answered question"""
    id: str
    user_id: str = Field(..., alias="userId")
    vocabulary_id: str = Field(..., alias="vocabularyId")
    question_id: str = Field(..., alias="questionId")
    exercise_type: ExerciseType = Field(..., alias="exerciseType")
    user_answer: str = Field(..., alias="userAnswer")
    correct_answer: str = Field(..., alias="correctAnswer")
    is_correct: bool = Field(..., alias="isCorrect")
    response_time: float = Field(..., ge=0, alias="responseTime", description="Seconds")
    difficulty_rating: Optional[int] = Field(default=None, ge=0, le=5, alias="difficultyRating")
    performance_rating: int = Field(..., ge=0, le=5, alias="performanceRating")
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")


class DailyPractice(BaseModel):
    """Per-day, per-learner practice plan"""
    user_id: str
    date: date
    review_words: list[VocabularyItem] = Field(default_factory=list)
    new_words: list[VocabularyItem] = Field(default_factory=list)
    total_target: int
    completed: int = 0
    is_completed: bool = False

    @property
    def words(self) -> list[VocabularyItem]:
        """Review words followed by new words."""
        return self.review_words + self.new_words


class PracticeSession(BaseModel):
    """A batch of questions served together"""
    id: str
    user_id: str
    questions: list[ExerciseQuestion] = Field(default_factory=list)
    current_question_index: int = 0
    start_time: datetime = Field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None
    total_questions: int = 0
    correct_answers: int = 0
    session_type: PracticeSessionType = PracticeSessionType.DAILY_REVIEW
    generated_by_ai: bool = False

    class Config:
        use_enum_values = True


class AnswerOutcome(BaseModel):
    """Result of recording one answer"""
    vocabulary_id: str
    record_id: str
    is_correct: bool
    performance_rating: int
    new_mastery_level: MasteryLevel
    next_review_date: date
    interval: int
    ease_factor: float
    repetitions: int
    already_recorded: bool = False

    class Config:
        use_enum_values = True


class LearningStats(BaseModel):
    """Aggregated learning statistics for one learner"""
    user_id: str
    total_vocabulary: int = 0
    mastered_vocabulary: int = 0
    learning_vocabulary: int = 0
    daily_reviews: int = 0
    streak_days: int = 0
    accuracy_rate: float = 0.0
    average_response_time: float = 0.0
    last_practice_date: Optional[date] = None
