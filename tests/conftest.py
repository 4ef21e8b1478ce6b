"""Shared fixtures: in-memory database, redis double and API client."""

import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizboard.database import Base, get_db
from quizboard.main import app
from quizboard.models import Profile, Quiz, QuizQuestion
from quizboard.stores.record_store import SqlAlchemyRecordStore
from quizboard.utils.cache import CacheService, get_cache_service
from quizboard.utils.rate_limiter import rate_limiter


class FakeRedis:
    """Dict-backed stand-in for the few redis commands the cache uses."""

    def __init__(self, fail: bool = False):
        self.data = {}
        self.ttls = {}
        self.fail = fail
        # number of upcoming setex calls that fail, for one-off write errors
        self.setex_failures = 0

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("redis is down")

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self._check()
        if self.setex_failures:
            self.setex_failures -= 1
            raise redis.ConnectionError("write timed out")
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def set(self, key, value, ex=None, nx=False):
        self._check()
        if nx and key in self.data:
            return None
        self.data[key] = value
        self.ttls[key] = ex
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return SqlAlchemyRecordStore(db)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return CacheService(redis_client=fake_redis)


@pytest.fixture
def make_profile(db):
    def _make(username="learner", full_name=None, bonus_point=0, avatar_url=None, **extra):
        profile = Profile(
            username=username,
            full_name=full_name,
            bonus_point=bonus_point,
            avatar_url=avatar_url,
            email=extra.pop("email", f"{username or full_name or 'anon'}@example.com"),
            **extra,
        )
        db.add(profile)
        db.commit()
        return profile.id

    return _make


@pytest.fixture
def make_quiz(db):
    """Create a quiz from question dicts; list options are stored as JSON text."""

    def _make(questions, title="Capitals", pass_score=None, **extra):
        quiz = Quiz(title=title, pass_score=pass_score, **extra)
        db.add(quiz)
        db.flush()
        for position, data in enumerate(questions, start=1):
            data = dict(data)
            options = data.pop("options", None)
            if isinstance(options, (list, dict)):
                options = json.dumps(options)
            data.setdefault("order_in_quiz", position)
            data.setdefault("question_type", "multiple_choice")
            data.setdefault("question_text", f"Question {position}")
            db.add(QuizQuestion(quiz_id=quiz.id, options=options, **data))
        db.commit()
        return quiz.id

    return _make


@pytest.fixture
def client(db, cache):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_service] = lambda: cache
    rate_limiter.reset()

    yield TestClient(app)

    app.dependency_overrides.clear()
    rate_limiter.reset()
