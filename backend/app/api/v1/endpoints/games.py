"""
Games API Endpoints
REST API for quiz and matching game sessions.
"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional
import logging

from app.agents.orchestrator import LearningEngine
from app.core.dependencies import get_learning_engine
from app.core.exceptions import LearningEngineError
from app.models.game import GameQuestion, GameResult, MatchingPairs
from app.schemas.game import (
    CreateGameSessionRequest,
    FinalizeGameSessionRequest,
    GameSessionResponse,
    ScoreRequest,
    ScoreResponse
)


logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== SCORING ENDPOINTS ====================

@router.post("/score", response_model=ScoreResponse)
async def score_game(
    request: ScoreRequest,
    engine: LearningEngine = Depends(get_learning_engine)
):
    """
    Convert raw session counters into points.

    Points = base per correct answer, plus speed, streak, perfect-score
    and accuracy bonuses, applied in that order.
    """
    try:
        points = await engine.score_game_session(
            request.game_type,
            request.correct_count,
            request.total_count,
            request.time_spent_seconds,
            request.best_streak
        )
        return ScoreResponse(game_type=request.game_type, points=points)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error scoring game: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ==================== SESSION ENDPOINTS ====================

@router.post("/sessions", response_model=GameSessionResponse)
async def create_game_session(
    request: CreateGameSessionRequest,
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Start a new quiz or matching session."""
    try:
        session = await engine.create_game_session(
            request.user_id,
            request.game_type,
            mode=request.mode,
            theme=request.theme
        )
        return GameSessionResponse.from_session(session)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error creating game session: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sessions/{session_id}/finalize", response_model=GameResult)
async def finalize_game_session(
    session_id: str,
    request: FinalizeGameSessionRequest,
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Close a session with its outcome. A second call is rejected."""
    try:
        return await engine.finalize_game_session(
            request.user_id,
            session_id,
            request.correct_count,
            request.total_count,
            request.time_spent_seconds,
            request.best_streak
        )
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error finalizing game session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ==================== CONTENT ENDPOINTS ====================

@router.get("/sessions/{session_id}/quiz", response_model=list[GameQuestion])
async def get_quiz_questions(
    session_id: str,
    user_id: str = Query(..., description="User ID"),
    count: Optional[int] = Query(default=None, ge=1, description="Number of questions"),
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Get quiz questions for a session, words due for review first."""
    try:
        return await engine.generate_quiz_questions(user_id, session_id, count)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error generating quiz questions: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/sessions/{session_id}/matching", response_model=MatchingPairs)
async def get_matching_pairs(
    session_id: str,
    user_id: str = Query(..., description="User ID"),
    pair_count: Optional[int] = Query(default=None, ge=1, description="Number of pairs"),
    theme: Optional[str] = Query(default=None, description="Vocabulary category"),
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Get word/meaning pairs for a matching session."""
    try:
        return await engine.generate_matching_pairs(user_id, session_id, pair_count, theme)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error generating matching pairs: {e}")
        raise HTTPException(status_code=500, detail=str(e))
