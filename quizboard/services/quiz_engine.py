"""
Quiz engine - load, score and record quiz attempts

Collaborators are injected so the engine can run against any record store
and identity provider:

    engine = QuizEngine(store, identity, cache=cache_service)
    session = engine.start_session(quiz_id)
    ...answers and advance() on the session...
    outcome = engine.submit(session)
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from quizboard.config import settings
from quizboard.domain import Question, QuizDefinition
from quizboard.exceptions import QuizLoadError, QuizNotFoundError, RecordStoreError
from quizboard.services.grading_service import GradingResult, GradingService, grading_service, is_passed
from quizboard.services.option_normalizer import decode_options
from quizboard.services.quiz_session import QuizSession
from quizboard.services.rewards_service import RewardsService, rewards_service
from quizboard.stores.identity import IdentityProvider
from quizboard.stores.record_store import RecordStore
from quizboard.utils.cache import CacheService

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """What happened when an attempt was submitted"""
    result: GradingResult
    is_passed: bool
    attempt_id: Optional[str] = None
    persisted: bool = False
    bonus_awarded: bool = False


class QuizEngine:
    """Drives one learner's quiz attempts against injected collaborators"""
    
    def __init__(
        self,
        store: RecordStore,
        identity: IdentityProvider,
        cache: Optional[CacheService] = None,
        rewards: RewardsService = rewards_service,
        grader: GradingService = grading_service,
        pass_bonus_points: int = settings.PASS_BONUS_POINTS,
        cache_ttl: int = settings.QUIZ_CACHE_TTL
    ):
        self.store = store
        self.identity = identity
        self.cache = cache
        self.rewards = rewards
        self.grader = grader
        self.pass_bonus_points = pass_bonus_points
        self.cache_ttl = cache_ttl
    
    def load_quiz(self, quiz_id: str) -> QuizDefinition:
        """
        Load a quiz and its questions in one fetch
        
        Questions are normalized once here and sorted by order_in_quiz.
        
        Raises:
            QuizNotFoundError: no quiz with this id
            QuizLoadError: the record store failed
        """
        if not quiz_id:
            raise QuizNotFoundError(quiz_id)
        
        cache_key = CacheService.quiz_key(quiz_id)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached:
                logger.info(f"Returning cached quiz {quiz_id}")
                return QuizDefinition.from_dict(cached)
        
        try:
            record = self.store.fetch_one("quizzes", {"id": quiz_id}, embed=("questions",))
        except RecordStoreError as e:
            logger.error(f"Failed to load quiz {quiz_id}: {str(e)}")
            raise QuizLoadError(f"Failed to load quiz {quiz_id}") from e
        
        if record is None:
            raise QuizNotFoundError(quiz_id)
        
        quiz = self._build_definition(record)
        logger.info(f"Loaded quiz {quiz_id} with {len(quiz.questions)} questions")
        
        if self.cache is not None:
            self.cache.set(cache_key, quiz.to_dict(), ttl=self.cache_ttl)
        
        return quiz
    
    def start_session(self, quiz_id: str) -> QuizSession:
        """
        Load the quiz and open a session owned by the current user

        The owner is fixed here, so whoever submits later cannot change who
        the attempt is credited to.
        """
        quiz = self.load_quiz(quiz_id)
        
        try:
            user = self.identity.current_user()
        except RecordStoreError as e:
            logger.error(f"Could not resolve current user, quiz {quiz_id} runs anonymously: {str(e)}")
            user = None
        
        return QuizSession.start(quiz, user_id=user.id if user else None)
    
    def score(self, session: QuizSession) -> GradingResult:
        """Grade a session that has just submitted its last question"""
        result = self.grader.grade_quiz(session.quiz.questions, session.answers)
        session.complete(result)
        return result
    
    def submit(self, session: QuizSession, record: bool = True) -> SubmissionOutcome:
        """
        Score the session, then record it for the signed-in user
        
        Side effects run in order: attempt insert, bonus points on a pass
        (only after the insert succeeded), daily activity. Each failure is
        logged and reflected in the outcome; the computed score stands.
        Anonymous attempts are scored but not recorded, as are submissions
        with record=False (a repeat of one that was already recorded).
        """
        result = self.score(session)
        quiz = session.quiz
        outcome = SubmissionOutcome(result=result, is_passed=is_passed(result.score, quiz.pass_score))
        
        if not record:
            logger.info(f"Session {session.session_id} was already submitted, attempt not recorded again")
            return outcome
        
        user_id = session.user_id
        if user_id is None:
            logger.info(f"Anonymous attempt on quiz {quiz.id} scored {result.score}, not recorded")
            return outcome
        
        try:
            attempt = self.store.insert("user_quiz_attempts", {
                "user_id": user_id,
                "quiz_id": quiz.id,
                "score_obtained": result.score,
                "is_passed": outcome.is_passed,
                "attempted_at": datetime.now(timezone.utc),
            })
        except RecordStoreError as e:
            logger.error(f"Error saving quiz results for user {user_id}: {str(e)}")
            return outcome
        
        outcome.persisted = True
        outcome.attempt_id = attempt["id"]
        logger.info(
            f"Quiz attempt saved: {attempt['id']}, user={user_id}, "
            f"score={result.score}/{result.max_score}, passed={outcome.is_passed}"
        )
        
        if outcome.is_passed:
            try:
                outcome.bonus_awarded = self.rewards.award_bonus_points(
                    self.store, user_id, self.pass_bonus_points
                )
            except RecordStoreError as e:
                logger.error(f"Failed to award bonus points to user {user_id}: {str(e)}")
        
        try:
            self.rewards.record_daily_activity(self.store, user_id, "quiz_attempted", 1)
        except RecordStoreError as e:
            logger.error(f"Failed to record quiz activity for user {user_id}: {str(e)}")
        
        return outcome
    
    def _build_definition(self, record: Dict[str, Any]) -> QuizDefinition:
        questions = [self._normalize_question(raw) for raw in record.get("questions") or []]
        # sorted() is stable; questions without an order go last
        questions = sorted(
            questions,
            key=lambda q: (q.order_in_quiz is None, q.order_in_quiz or 0)
        )
        
        return QuizDefinition(
            id=record["id"],
            title=record["title"],
            description=record.get("description"),
            image_url=record.get("image_url"),
            pass_score=record.get("pass_score"),
            questions=questions,
        )
    
    def _normalize_question(self, raw: Dict[str, Any]) -> Question:
        normalized = decode_options(
            raw["id"],
            raw.get("question_type"),
            raw.get("options"),
            raw.get("correct_answer_index"),
        )
        
        return Question(
            id=raw["id"],
            question_type=raw.get("question_type"),
            question_text=raw.get("question_text"),
            order_in_quiz=raw.get("order_in_quiz"),
            options=normalized.options,
            correct_answer_index=raw.get("correct_answer_index"),
            correct_answer_text=raw.get("correct_answer_text"),
            image_url=raw.get("image_url"),
            hint=raw.get("hint"),
        )
