"""
Practice API Endpoints
REST API for daily plans, exercise questions, practice sessions and answers.
"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional
import logging

from app.agents.orchestrator import LearningEngine
from app.core.dependencies import get_learning_engine
from app.core.exceptions import LearningEngineError
from app.models.vocabulary import (
    AnswerOutcome,
    ExerciseQuestion,
    LearningStats,
    PracticeSession
)
from app.schemas.practice import (
    AnswerRequest,
    DailyPracticeResponse,
    ItemStateResponse,
    PracticeSessionRequest,
    QuestionRequest
)


logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== PLAN ENDPOINTS ====================

@router.get("/daily", response_model=DailyPracticeResponse)
async def get_daily_practice(
    user_id: str = Query(..., description="User ID"),
    target_count: Optional[int] = Query(default=None, description="Words to practice today"),
    engine: LearningEngine = Depends(get_learning_engine)
):
    """
    Get today's practice plan.

    Words due for review come first (never-scheduled and most overdue
    first); remaining room is filled with the newest unseen words.
    """
    try:
        plan = await engine.plan_daily_practice(user_id, target_count)
        return DailyPracticeResponse.from_plan(plan)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error planning daily practice: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ==================== EXERCISE ENDPOINTS ====================

@router.post("/questions", response_model=ExerciseQuestion)
async def create_question(
    request: QuestionRequest,
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Generate one adaptive exercise question for a vocabulary item."""
    try:
        return await engine.generate_question_for_id(
            request.user_id,
            request.vocabulary_id,
            request.recent_accuracy
        )
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error generating question: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sessions", response_model=PracticeSession)
async def create_practice_session(
    request: PracticeSessionRequest,
    engine: LearningEngine = Depends(get_learning_engine)
):
    """
    Create a practice session with one question per distinct word.

    AI-generated questions are used when available; the rest are
    generated locally. Question order is shuffled.
    """
    try:
        items = await engine.load_vocabulary_items(request.user_id, request.vocabulary_ids)
        return await engine.create_practice_session(
            request.user_id,
            items,
            session_type=request.session_type,
            use_ai=request.use_ai
        )
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error creating practice session: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/answers", response_model=AnswerOutcome)
async def submit_answer(
    request: AnswerRequest,
    engine: LearningEngine = Depends(get_learning_engine)
):
    """
    Record an answer and reschedule the word.

    Submitting the same question twice returns the stored outcome
    without counting the review again.
    """
    try:
        return await engine.record_answer(
            user_id=request.user_id,
            question_id=request.question_id,
            vocabulary_id=request.vocabulary_id,
            submitted_answer=request.submitted_answer,
            correct_answer=request.correct_answer,
            response_time_seconds=request.response_time_seconds,
            difficulty_rating=request.difficulty_rating,
            exercise_type=request.exercise_type
        )
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error recording answer: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ==================== PROGRESS ENDPOINTS ====================

@router.get("/stats", response_model=LearningStats)
async def get_learning_stats(
    user_id: str = Query(..., description="User ID"),
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Get aggregated learning statistics for a user."""
    try:
        return await engine.get_learning_stats(user_id)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error getting learning stats: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/items/{vocabulary_id}/rebuild", response_model=ItemStateResponse)
async def rebuild_item_state(
    vocabulary_id: str,
    user_id: str = Query(..., description="User ID"),
    engine: LearningEngine = Depends(get_learning_engine)
):
    """Recompute an item's scheduling state from its practice records."""
    try:
        item = await engine.rebuild_item_state(user_id, vocabulary_id)
        return ItemStateResponse.from_item(item)
    except LearningEngineError:
        raise
    except Exception as e:
        logger.error(f"Error rebuilding item {vocabulary_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
