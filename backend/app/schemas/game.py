"""
Game Schemas
Request and response schemas for game API endpoints.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.models.game import GameMode, GameSession, GameType


# ==================== REQUEST SCHEMAS ====================

class ScoreRequest(BaseModel):
    """Raw counters of a completed game session."""
    game_type: GameType
    correct_count: int = Field(..., description="Correct answers")
    total_count: int = Field(..., description="Questions or pairs in the session")
    time_spent_seconds: float = Field(..., description="Total session time")
    best_streak: int = Field(default=0, description="Longest run of correct answers")


class CreateGameSessionRequest(BaseModel):
    """Request to start a game session."""
    user_id: str = Field(..., min_length=1, description="User ID")
    game_type: GameType
    mode: GameMode = GameMode.CLASSIC
    theme: Optional[str] = None


class FinalizeGameSessionRequest(BaseModel):
    """Outcome submitted when a game session ends."""
    user_id: str = Field(..., min_length=1, description="User ID")
    correct_count: int
    total_count: int
    time_spent_seconds: float
    best_streak: int = 0


# ==================== RESPONSE SCHEMAS ====================

class ScoreResponse(BaseModel):
    """Points earned by a session."""
    game_type: GameType
    points: int

    class Config:
        use_enum_values = True


class GameSessionResponse(BaseModel):
    """A game session as returned to clients."""
    session_id: str
    user_id: str
    game_type: GameType
    mode: GameMode
    theme: Optional[str] = None
    finalized: bool = False
    created_at: datetime

    class Config:
        use_enum_values = True

    @classmethod
    def from_session(cls, session: GameSession) -> "GameSessionResponse":
        return cls(
            session_id=session.id,
            user_id=session.user_id,
            game_type=session.game_type,
            mode=session.mode,
            theme=session.theme,
            finalized=session.finalized,
            created_at=session.created_at
        )
