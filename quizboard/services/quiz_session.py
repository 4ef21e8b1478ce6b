"""
Quiz session - one learner's pass through a quiz

States:
    PRESENTING(cursor) -> PRESENTING(cursor + 1) -> ... -> SCORING -> RESULTS
    RESULTS -> PRESENTING(0) on retake

A session is created only once its quiz has loaded, so it starts presenting
question 0. Each session owns its answer map; nothing is shared between
sessions, and a retake starts a new generation so requests issued against
the previous run can be rejected.
"""
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from quizboard.domain import Question, QuizDefinition
from quizboard.exceptions import (
    EmptyQuizError,
    SessionStateError,
    StaleSessionError,
    UnansweredQuestionError,
)
from quizboard.services.grading_service import GradingResult

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    PRESENTING = "presenting"
    SCORING = "scoring"
    RESULTS = "results"


@dataclass
class QuizSession:
    session_id: str
    quiz: QuizDefinition
    state: SessionState = SessionState.PRESENTING
    cursor: int = 0
    answers: Dict[str, Any] = field(default_factory=dict)
    generation: int = 1
    user_id: Optional[str] = None
    score: Optional[int] = None
    feedback: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    breakdown: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def start(cls, quiz: QuizDefinition, user_id: Optional[str] = None) -> "QuizSession":
        """Fresh session on question 0; attempts are credited to user_id, if any"""
        if not quiz.questions:
            raise EmptyQuizError(f"Quiz {quiz.id} has no questions")
        
        session = cls(session_id=str(uuid.uuid4()), quiz=quiz, user_id=user_id)
        logger.info(f"Quiz session {session.session_id} started for quiz {quiz.id}")
        return session

    @property
    def current_question(self) -> Optional[Question]:
        if self.state != SessionState.PRESENTING:
            return None
        return self.quiz.questions[self.cursor]

    @property
    def is_last_question(self) -> bool:
        return self.cursor == len(self.quiz.questions) - 1

    @property
    def can_advance(self) -> bool:
        question = self.current_question
        return question is not None and bool(self.answers.get(question.id))

    def check_generation(self, generation: Optional[int]) -> None:
        if generation is not None and generation != self.generation:
            raise StaleSessionError(expected=self.generation, received=generation)

    def answer(self, question_id: str, value: Any, generation: Optional[int] = None) -> None:
        """Store the answer for the current question, replacing any earlier one"""
        self.check_generation(generation)
        self._require(SessionState.PRESENTING)
        
        if question_id != self.current_question.id:
            raise SessionStateError(
                f"Question {question_id} is not the current question of session {self.session_id}"
            )
        
        self.answers[question_id] = value

    def advance(self, generation: Optional[int] = None) -> bool:
        """
        Move past the current question
        
        Returns:
            True when the last question was submitted and the session now
            awaits scoring, False when the cursor moved to the next question
        """
        self.check_generation(generation)
        self._require(SessionState.PRESENTING)
        
        if not self.can_advance:
            raise UnansweredQuestionError(self.current_question.id)
        
        if self.is_last_question:
            self.state = SessionState.SCORING
            return True
        
        self.cursor += 1
        return False

    def complete(self, result: GradingResult) -> None:
        self._require(SessionState.SCORING)
        
        self.score = result.score
        self.feedback = result.feedback
        self.breakdown = result.breakdown
        self.state = SessionState.RESULTS

    def retake(self, generation: Optional[int] = None) -> None:
        self.check_generation(generation)
        self._require(SessionState.RESULTS)
        
        self.cursor = 0
        self.answers = {}
        self.score = None
        self.feedback = {}
        self.breakdown = []
        self.generation += 1
        self.state = SessionState.PRESENTING
        logger.info(f"Quiz session {self.session_id} retaken (generation {self.generation})")

    def _require(self, state: SessionState) -> None:
        if self.state != state:
            raise SessionStateError(
                f"Session {self.session_id} is {self.state.value}, expected {state.value}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "quiz": self.quiz.to_dict(),
            "state": self.state.value,
            "cursor": self.cursor,
            "answers": self.answers,
            "generation": self.generation,
            "user_id": self.user_id,
            "score": self.score,
            "feedback": self.feedback,
            "breakdown": self.breakdown,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizSession":
        return cls(
            session_id=data["session_id"],
            quiz=QuizDefinition.from_dict(data["quiz"]),
            state=SessionState(data["state"]),
            cursor=data["cursor"],
            answers=data.get("answers") or {},
            generation=data.get("generation", 1),
            user_id=data.get("user_id"),
            score=data.get("score"),
            feedback=data.get("feedback") or {},
            breakdown=data.get("breakdown") or [],
        )
