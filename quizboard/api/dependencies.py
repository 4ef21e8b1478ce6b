"""
FastAPI dependencies wiring collaborators into services
"""
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from quizboard.database import get_db
from quizboard.services.quiz_engine import QuizEngine
from quizboard.stores.identity import CurrentUser, IdentityProvider, RequestIdentityProvider, USER_ID_HEADER
from quizboard.stores.record_store import RecordStore, SqlAlchemyRecordStore
from quizboard.stores.session_store import SessionStore
from quizboard.utils.cache import CacheService, get_cache_service


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return SqlAlchemyRecordStore(db)


def get_identity(
    request: Request,
    store: RecordStore = Depends(get_record_store)
) -> IdentityProvider:
    return RequestIdentityProvider(request.headers.get(USER_ID_HEADER), store)


def require_user(identity: IdentityProvider = Depends(get_identity)) -> CurrentUser:
    """Current user, or 401 for anonymous requests"""
    user = identity.current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def get_session_store(cache: CacheService = Depends(get_cache_service)) -> SessionStore:
    return SessionStore(cache)


def get_quiz_engine(
    store: RecordStore = Depends(get_record_store),
    identity: IdentityProvider = Depends(get_identity),
    cache: CacheService = Depends(get_cache_service)
) -> QuizEngine:
    return QuizEngine(store, identity, cache=cache)
