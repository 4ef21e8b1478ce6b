"""
Quiz session API endpoints - answer, advance, submit, retake
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from quizboard.api.dependencies import get_quiz_engine, get_session_store
from quizboard.api.presenters import advance_response, session_view
from quizboard.exceptions import (
    SessionNotFoundError,
    SessionStateError,
    SessionStoreUnavailableError,
)
from quizboard.schemas.quiz import AdvanceRequest, AdvanceResponse, AnswerRequest, SessionView
from quizboard.services.quiz_engine import QuizEngine
from quizboard.services.quiz_session import QuizSession
from quizboard.stores.session_store import SessionStore


router = APIRouter(prefix="/api/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


def _load(sessions: SessionStore, session_id: str) -> QuizSession:
    try:
        return sessions.load(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Quiz session not found or expired")


def _save(sessions: SessionStore, session: QuizSession) -> None:
    try:
        sessions.save(session)
    except SessionStoreUnavailableError as e:
        logger.error(str(e))
        raise HTTPException(status_code=503, detail="Quiz sessions are temporarily unavailable")


def _claim_submission(sessions: SessionStore, session: QuizSession) -> Optional[bool]:
    """
    True for the one request allowed to record this run, False for repeats,
    None when the marker could not be written (the run is then not recorded)
    """
    try:
        return sessions.claim_submission(session)
    except SessionStoreUnavailableError as e:
        logger.error(f"{str(e)}; attempt scored but not recorded")
        return None


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str, sessions: SessionStore = Depends(get_session_store)):
    """Current question, or results once the quiz is submitted"""
    return session_view(_load(sessions, session_id))


@router.put("/{session_id}/answers/{question_id}", response_model=SessionView)
async def answer_question(
    session_id: str,
    question_id: str,
    answer: AnswerRequest,
    sessions: SessionStore = Depends(get_session_store)
):
    """
    Capture the answer for the current question

    A later answer for the same question replaces the earlier one.
    """
    session = _load(sessions, session_id)

    try:
        session.answer(question_id, answer.value, generation=answer.generation)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    _save(sessions, session)
    return session_view(session)


@router.post("/{session_id}/next", response_model=AdvanceResponse)
async def next_question(
    session_id: str,
    request: Optional[AdvanceRequest] = None,
    sessions: SessionStore = Depends(get_session_store),
    engine: QuizEngine = Depends(get_quiz_engine)
):
    """
    Next question, or submit on the last one

    Submitting scores the attempt and, for the user who started the session,
    records it and awards bonus points on a pass. A run is recorded at most
    once: retries and concurrent submits get the results without a second
    attempt. Recording or storage failures never hide the score.
    """
    session = _load(sessions, session_id)
    generation = request.generation if request else None

    try:
        submitted = session.advance(generation=generation)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not submitted:
        _save(sessions, session)
        return advance_response(session)

    claimed = _claim_submission(sessions, session)
    outcome = engine.submit(session, record=claimed is True)

    try:
        sessions.save(session)
    except SessionStoreUnavailableError as e:
        logger.error(f"{str(e)}; returning results without a stored snapshot")

    return advance_response(
        session,
        outcome,
        bonus_points=engine.pass_bonus_points,
        already_submitted=claimed is False
    )


@router.post("/{session_id}/retake", response_model=SessionView)
async def retake_quiz(
    session_id: str,
    request: Optional[AdvanceRequest] = None,
    sessions: SessionStore = Depends(get_session_store)
):
    """Start over from question 1 with no answers"""
    session = _load(sessions, session_id)

    try:
        session.retake(generation=request.generation if request else None)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    _save(sessions, session)
    return session_view(session)
