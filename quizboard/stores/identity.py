"""
Identity provider - who is taking the quiz

Token verification belongs to the hosted auth service in front of this API;
requests arrive with the authenticated user's id in the X-User-Id header.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import logging

from quizboard.stores.record_store import RecordStore

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None


class IdentityProvider(ABC):
    """Current-user accessor"""

    @abstractmethod
    def current_user(self) -> Optional[CurrentUser]:
        """Return the signed-in user, or None for anonymous sessions"""
        ...


class StaticIdentityProvider(IdentityProvider):
    """Identity fixed at construction time (background jobs, tests)"""

    def __init__(self, user: Optional[CurrentUser] = None):
        self._user = user

    def current_user(self) -> Optional[CurrentUser]:
        return self._user


class RequestIdentityProvider(IdentityProvider):
    """Resolves the X-User-Id header against the profiles collection"""

    def __init__(self, user_id: Optional[str], store: RecordStore):
        self._user_id = user_id
        self._store = store
        self._resolved = False
        self._user: Optional[CurrentUser] = None

    def current_user(self) -> Optional[CurrentUser]:
        if self._resolved:
            return self._user

        self._resolved = True
        if not self._user_id:
            return None

        profile = self._store.fetch_one("profiles", {"id": self._user_id})
        if profile is None:
            logger.warning(f"Unknown user id in request header: {self._user_id}")
            return None

        self._user = CurrentUser(id=profile["id"], email=profile.get("email"))
        return self._user
