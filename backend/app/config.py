"""
Configuration settings for the Learning Engine.
All environment variables and engine constants are centralized here.
"""
from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "SmallTalk Learning Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    # API Settings
    API_V1_PREFIX: str = "/api/v1"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",  # Vite default
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173"
    ]

    # Azure OpenAI (optional question augmentation)
    AZURE_OPENAI_API_KEY: Optional[str] = None
    AZURE_OPENAI_ENDPOINT: Optional[str] = None
    AZURE_OPENAI_DEPLOYMENT_NAME: str = "gpt-4"
    AZURE_OPENAI_API_VERSION: str = "2024-02-15-preview"
    AZURE_OPENAI_MAX_TOKENS: int = 2000
    AZURE_OPENAI_TEMPERATURE: float = 0.7
    QUESTION_AUGMENTATION_ENABLED: bool = False

    # Azure Cosmos DB (item store)
    COSMOS_DB_ENDPOINT: Optional[str] = None
    COSMOS_DB_KEY: Optional[str] = None
    COSMOS_DB_DATABASE_NAME: str = "smalltalk_learning_db"
    COSMOS_DB_TIMEOUT_SECONDS: int = 10
    # Container names
    COSMOS_DB_VOCABULARY_CONTAINER: str = "vocabulary"
    COSMOS_DB_PRACTICE_RECORDS_CONTAINER: str = "practice_records"
    COSMOS_DB_GAME_SESSIONS_CONTAINER: str = "game_sessions"

    # SRS (Spaced Repetition System) Settings
    SRS_INITIAL_EASE_FACTOR: float = 2.5
    SRS_MIN_EASE_FACTOR: float = 1.3
    SRS_MAX_EASE_FACTOR: float = 3.0
    SRS_INTERVAL_MODIFIER: float = 1.0
    SRS_INITIAL_INTERVAL_DAYS: int = 1
    SRS_SECOND_INTERVAL_DAYS: int = 6
    SRS_MAX_INTERVAL_DAYS: int = 365
    SRS_TARGET_RESPONSE_TIME_SECONDS: float = 10.0

    # Practice Settings
    DAILY_PRACTICE_TARGET_COUNT: int = 20
    EXERCISE_MAX_DISTRACTORS: int = 3
    DISTRACTOR_POOL_SIZE: int = 30
    DEFAULT_RECENT_ACCURACY: float = 0.7

    # Quiz points
    QUIZ_QUESTIONS_PER_SESSION: int = 10
    QUIZ_BASE_POINTS_PER_CORRECT: int = 10
    QUIZ_SPEED_BONUS_THRESHOLD_SECONDS: float = 10.0  # per question
    QUIZ_SPEED_BONUS_POINTS: int = 5
    QUIZ_STREAK_BONUS_MULTIPLIER: float = 1.5
    QUIZ_PERFECT_SCORE_BONUS: int = 100
    QUIZ_ACCURACY_BONUS_THRESHOLD: float = 0.8
    QUIZ_ACCURACY_BONUS_POINTS: int = 50

    # Matching points
    MATCHING_PAIRS_PER_SESSION: int = 8
    MATCHING_BASE_POINTS_PER_CORRECT: int = 8
    MATCHING_SPEED_BONUS_THRESHOLD_SECONDS: float = 60.0  # whole session
    MATCHING_SPEED_BONUS_POINTS: int = 25
    MATCHING_STREAK_BONUS_MULTIPLIER: float = 1.3
    MATCHING_PERFECT_SCORE_BONUS: int = 80
    MATCHING_ACCURACY_BONUS_THRESHOLD: float = 0.9
    MATCHING_ACCURACY_BONUS_POINTS: int = 40

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


settings = get_settings()
