"""
Quiz catalogue and quiz session start API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from quizboard.api.dependencies import get_quiz_engine, get_record_store, get_session_store
from quizboard.api.presenters import quiz_view, session_view
from quizboard.exceptions import (
    EmptyQuizError,
    QuizLoadError,
    QuizNotFoundError,
    RecordStoreError,
    SessionStoreUnavailableError,
)
from quizboard.schemas.quiz import QuizListResponse, QuizView, SessionView
from quizboard.services.catalog_service import catalog_service
from quizboard.services.quiz_engine import QuizEngine
from quizboard.stores.record_store import RecordStore
from quizboard.stores.session_store import SessionStore


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.get("", response_model=QuizListResponse)
async def list_quizzes(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    store: RecordStore = Depends(get_record_store)
):
    """
    List available quizzes, newest first

    Each item carries its question count.
    """
    try:
        return QuizListResponse(**catalog_service.list_quizzes(store, page, page_size))
    except RecordStoreError as e:
        logger.error(f"Failed to list quizzes: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to load quizzes")


@router.get("/{quiz_id}", response_model=QuizView)
async def get_quiz(quiz_id: str, engine: QuizEngine = Depends(get_quiz_engine)):
    """
    Get a quiz with its normalized questions

    Correct answers, answer indexes and hints are never exposed here.
    """
    try:
        return quiz_view(engine.load_quiz(quiz_id))
    except QuizNotFoundError:
        raise HTTPException(status_code=404, detail="Quiz not found")
    except QuizLoadError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load quiz: {str(e)}")


@router.post("/{quiz_id}/sessions", response_model=SessionView, status_code=201)
async def start_session(
    quiz_id: str,
    engine: QuizEngine = Depends(get_quiz_engine),
    sessions: SessionStore = Depends(get_session_store)
):
    """
    Start taking a quiz

    - Loads the quiz and normalizes its questions
    - Returns a fresh session presenting question 1
    """
    try:
        session = engine.start_session(quiz_id)
        sessions.save(session)
    except QuizNotFoundError:
        raise HTTPException(status_code=404, detail="Quiz not found")
    except QuizLoadError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load quiz: {str(e)}")
    except EmptyQuizError:
        raise HTTPException(status_code=422, detail="Quiz has no questions yet")
    except SessionStoreUnavailableError as e:
        logger.error(str(e))
        raise HTTPException(status_code=503, detail="Quiz sessions are temporarily unavailable")

    return session_view(session)
