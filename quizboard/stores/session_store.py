"""
Quiz session store - in-progress sessions live in Redis between requests
"""
import logging

from quizboard.config import settings
from quizboard.exceptions import SessionNotFoundError, SessionStoreUnavailableError
from quizboard.services.quiz_session import QuizSession
from quizboard.utils.cache import CacheService

logger = logging.getLogger(__name__)


class SessionStore:
    """Loads and saves QuizSession snapshots with a sliding TTL"""
    
    def __init__(self, cache: CacheService, ttl: int = settings.SESSION_TTL):
        self.cache = cache
        self.ttl = ttl
    
    def load(self, session_id: str) -> QuizSession:
        data = self.cache.get(CacheService.session_key(session_id))
        if data is None:
            raise SessionNotFoundError(session_id)
        return QuizSession.from_dict(data)
    
    def save(self, session: QuizSession) -> None:
        key = CacheService.session_key(session.session_id)
        if not self.cache.set(key, session.to_dict(), ttl=self.ttl):
            raise SessionStoreUnavailableError(
                f"Could not persist quiz session {session.session_id}"
            )
        logger.debug(f"Saved quiz session {session.session_id} (generation {session.generation})")
    
    def claim_submission(self, session: QuizSession) -> bool:
        """
        Atomically mark the session's current generation as submitted
        
        Only the caller that gets True may record the attempt; retries and
        concurrent submits of the same run get False.
        
        Raises:
            SessionStoreUnavailableError: the marker could not be written
        """
        key = CacheService.submission_key(session.session_id, session.generation)
        claimed = self.cache.add(key, {"quiz_id": session.quiz.id}, ttl=self.ttl)
        if claimed is None:
            raise SessionStoreUnavailableError(
                f"Could not mark quiz session {session.session_id} as submitted"
            )
        if not claimed:
            logger.warning(
                f"Quiz session {session.session_id} generation {session.generation} already submitted"
            )
        return claimed
