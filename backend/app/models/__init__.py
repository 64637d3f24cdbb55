"""
Pydantic Models Module
Contains data models for all entities handled by the learning engine.
"""
from app.models.vocabulary import (
    VocabularyItem,
    ExerciseQuestion,
    ExerciseType,
    PracticeRecord,
    DailyPractice,
    PracticeSession,
    AnswerOutcome,
    LearningStats,
    MasteryLevel
)
from app.models.game import GameType, GameSession, GameResult, PointsConfig

__all__ = [
    "VocabularyItem", "ExerciseQuestion", "ExerciseType", "PracticeRecord",
    "DailyPractice", "PracticeSession", "AnswerOutcome", "LearningStats", "MasteryLevel",
    "GameType", "GameSession", "GameResult", "PointsConfig"
]
