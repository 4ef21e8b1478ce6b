"""
Domain objects to response schemas
"""
from typing import Optional

from quizboard.domain import Question, QuizDefinition
from quizboard.schemas.quiz import (
    AdvanceResponse,
    OptionView,
    QuestionFeedback,
    QuestionView,
    QuizView,
    ResultsView,
    SessionView,
    SubmissionView,
)
from quizboard.services.grading_service import grading_service, is_passed
from quizboard.services.quiz_engine import SubmissionOutcome
from quizboard.services.quiz_session import QuizSession, SessionState


def question_view(question: Question) -> QuestionView:
    return QuestionView(
        id=question.id,
        question_type=question.question_type,
        question_text=question.question_text,
        image_url=question.image_url,
        options=[OptionView(id=opt.id, option_text=opt.option_text) for opt in question.options],
    )


def quiz_view(quiz: QuizDefinition) -> QuizView:
    return QuizView(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        image_url=quiz.image_url,
        pass_score=quiz.pass_score,
        questions=[question_view(q) for q in quiz.questions],
    )


def session_view(session: QuizSession) -> SessionView:
    quiz = session.quiz
    current = session.current_question
    results = None
    
    if session.state == SessionState.RESULTS:
        results = ResultsView(
            score=session.score,
            total_questions=len(quiz.questions),
            pass_score=quiz.pass_score,
            is_passed=is_passed(session.score, quiz.pass_score),
            message=grading_service.result_message(session.score, quiz.pass_score),
            feedback=session.feedback,
            breakdown=[QuestionFeedback(**item) for item in session.breakdown],
        )
    
    return SessionView(
        session_id=session.session_id,
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        state=session.state.value,
        generation=session.generation,
        cursor=session.cursor,
        total_questions=len(quiz.questions),
        current_question=question_view(current) if current else None,
        current_answer=session.answers.get(current.id) if current else None,
        can_advance=session.can_advance,
        is_last_question=session.is_last_question,
        results=results,
    )


def advance_response(
    session: QuizSession,
    outcome: Optional[SubmissionOutcome] = None,
    bonus_points: int = 0,
    already_submitted: bool = False
) -> AdvanceResponse:
    submission = None
    if outcome is not None:
        submission = SubmissionView(
            recorded=outcome.persisted,
            attempt_id=outcome.attempt_id,
            bonus_awarded=outcome.bonus_awarded,
            bonus_points=bonus_points if outcome.bonus_awarded else 0,
            already_submitted=already_submitted,
        )
    return AdvanceResponse(session=session_view(session), submission=submission)
