"""
Game Models
Defines quiz/matching game sessions, results and points constants.
"""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field

from app.config import Settings, get_settings
from app.models.vocabulary import ExerciseQuestion, StoreModel


class GameType(str, Enum):
    """Game activity type"""
    QUIZ = "quiz"
    MATCHING = "matching"


class GameMode(str, Enum):
    """Game play mode"""
    CLASSIC = "classic"
    TIMED = "timed"
    THEMED = "themed"


class PointsConfig(BaseModel):
    """Constants bundle used to score one kind of game session"""
    base_points_per_correct: int = Field(..., ge=0)
    speed_bonus_threshold_seconds: float = Field(..., ge=0)
    # "per_question": average seconds per question, "total": whole session
    speed_bonus_basis: Literal["per_question", "total"] = "per_question"
    speed_bonus_points: int = Field(..., ge=0)
    streak_bonus_multiplier: float = Field(..., ge=1.0)
    perfect_score_bonus: int = Field(..., ge=0)
    accuracy_bonus_threshold: float = Field(..., ge=0, le=1)
    accuracy_bonus_points: int = Field(..., ge=0)

    @classmethod
    def quiz_from_settings(cls, settings: Settings | None = None) -> "PointsConfig":
        """Points constants for quiz sessions."""
        settings = settings or get_settings()
        return cls(
            base_points_per_correct=settings.QUIZ_BASE_POINTS_PER_CORRECT,
            speed_bonus_threshold_seconds=settings.QUIZ_SPEED_BONUS_THRESHOLD_SECONDS,
            speed_bonus_basis="per_question",
            speed_bonus_points=settings.QUIZ_SPEED_BONUS_POINTS,
            streak_bonus_multiplier=settings.QUIZ_STREAK_BONUS_MULTIPLIER,
            perfect_score_bonus=settings.QUIZ_PERFECT_SCORE_BONUS,
            accuracy_bonus_threshold=settings.QUIZ_ACCURACY_BONUS_THRESHOLD,
            accuracy_bonus_points=settings.QUIZ_ACCURACY_BONUS_POINTS
        )

    @classmethod
    def matching_from_settings(cls, settings: Settings | None = None) -> "PointsConfig":
        """Points constants for matching sessions."""
        settings = settings or get_settings()
        return cls(
            base_points_per_correct=settings.MATCHING_BASE_POINTS_PER_CORRECT,
            speed_bonus_threshold_seconds=settings.MATCHING_SPEED_BONUS_THRESHOLD_SECONDS,
            speed_bonus_basis="total",
            speed_bonus_points=settings.MATCHING_SPEED_BONUS_POINTS,
            streak_bonus_multiplier=settings.MATCHING_STREAK_BONUS_MULTIPLIER,
            perfect_score_bonus=settings.MATCHING_PERFECT_SCORE_BONUS,
            accuracy_bonus_threshold=settings.MATCHING_ACCURACY_BONUS_THRESHOLD,
            accuracy_bonus_points=settings.MATCHING_ACCURACY_BONUS_POINTS
        )


class GameSession(StoreModel):
    """One play-through of a quiz or matching activity"""
    id: str
    user_id: str = Field(..., alias="userId")
    game_type: GameType = Field(..., alias="gameType")
    mode: GameMode = GameMode.CLASSIC
    theme: Optional[str] = None

    score: int = 0
    max_score: int = Field(default=0, alias="maxScore")
    accuracy: float = 0.0
    time_spent: float = Field(default=0.0, alias="timeSpent")
    questions_answered: int = Field(default=0, alias="questionsAnswered")
    correct_answers: int = Field(default=0, alias="correctAnswers")
    streak_achieved: int = Field(default=0, alias="streakAchieved")
    points_earned: int = Field(default=0, alias="pointsEarned")
    perfect_score: bool = Field(default=False, alias="perfectScore")

    finalized: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")
    finalized_at: Optional[datetime] = Field(default=None, alias="finalizedAt")


class GameResult(BaseModel):
    """Numbers produced when a game session is finalized"""
    session_id: str
    user_id: str
    game_type: GameType
    final_score: int
    max_score: int
    accuracy: float
    time_spent: float
    questions_answered: int
    correct_answers: int
    streak_achieved: int
    points_earned: int
    perfect_score: bool

    class Config:
        use_enum_values = True


class GameQuestion(ExerciseQuestion):
    """Exercise question served inside a game session"""
    game_session_id: str
    points_value: int
    difficulty_multiplier: float = 1.0


class MatchingPairs(BaseModel):
    """Words on the left, shuffled meanings on the right"""
    session_id: str
    left: list[dict] = Field(default_factory=list)
    right: list[str] = Field(default_factory=list)
    answer_key: dict[str, str] = Field(default_factory=dict)
