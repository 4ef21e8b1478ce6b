"""Tests for the SQLAlchemy-backed record store."""

import pytest

from quizboard.exceptions import RecordStoreError
from quizboard.models import Profile


@pytest.fixture
def profiles(make_profile):
    return [
        make_profile(username=name, bonus_point=points)
        for name, points in [("cara", 30), ("ana", 10), ("bia", 20), ("dan", 10)]
    ]


def test_fetch_filters_sorts_and_ranges(store, profiles):
    result = store.fetch(
        "profiles",
        order_by=[("bonus_point", False), ("username", True)],
        range_=(1, 2),
        count=True,
    )

    assert [r["username"] for r in result.records] == ["bia", "ana"]
    assert result.count == 4


def test_fetch_equality_filter(store, profiles):
    result = store.fetch("profiles", filters={"bonus_point": 10}, order_by=[("username", True)])

    assert [r["username"] for r in result.records] == ["ana", "dan"]
    assert result.count is None


def test_fetch_one_returns_none_when_nothing_matches(store):
    assert store.fetch_one("profiles", {"username": "nobody"}) is None


def test_embed_serializes_relationships(store, make_quiz):
    quiz_id = make_quiz([{"id": "q1", "options": ["A"]}, {"id": "q2", "options": ["B"]}])

    quiz = store.fetch_one("quizzes", {"id": quiz_id}, embed=("questions",))

    assert quiz["title"] == "Capitals"
    assert sorted(q["id"] for q in quiz["questions"]) == ["q1", "q2"]
    assert quiz["questions"][0]["options"] in ('["A"]', '["B"]')


def test_embed_many_to_one_is_a_dict(store, make_profile, make_quiz):
    quiz_id = make_quiz([{"options": ["A"]}])
    user_id = make_profile(username="ana")
    store.insert("user_quiz_attempts", {"user_id": user_id, "quiz_id": quiz_id, "score_obtained": 1, "is_passed": False})

    attempt = store.fetch_one("user_quiz_attempts", {"user_id": user_id}, embed=("profile", "quiz"))

    assert attempt["profile"]["username"] == "ana"
    assert attempt["quiz"]["id"] == quiz_id


def test_insert_returns_stored_row_with_defaults(store):
    record = store.insert("profiles", {"username": "eva", "email": "eva@example.com"})

    assert record["id"]
    assert record["bonus_point"] == 0


def test_update_and_delete_report_affected_rows(db, store, profiles):
    assert store.update("profiles", {"bonus_point": 10}, {"avatar_url": "x.png"}) == 2
    assert store.delete("profiles", {"username": "cara"}) == 1
    assert db.query(Profile).count() == 3


def test_increment_adds_in_place(db, store, profiles):
    assert store.increment("profiles", {"id": profiles[0]}, "bonus_point", 10) == 1

    db.expire_all()
    assert db.get(Profile, profiles[0]).bonus_point == 40


def test_increment_unknown_row_affects_nothing(store):
    assert store.increment("profiles", {"id": "missing"}, "bonus_point", 10) == 0


@pytest.mark.parametrize("call", [
    lambda s: s.fetch("courses"),
    lambda s: s.fetch("profiles", filters={"nickname": "x"}),
    lambda s: s.fetch("profiles", order_by=[("nickname", True)]),
    lambda s: s.fetch("profiles", embed=("friends",)),
    lambda s: s.fetch("profiles", range_=(5, 1)),
    lambda s: s.insert("profiles", {"nickname": "x"}),
    lambda s: s.increment("profiles", {}, "karma", 1),
])
def test_invalid_requests_raise_record_store_error(store, call):
    with pytest.raises(RecordStoreError):
        call(store)


def test_database_errors_are_wrapped_and_rolled_back(store, make_profile):
    make_profile(username="ana", email="dup@example.com")

    with pytest.raises(RecordStoreError):
        store.insert("profiles", {"username": "other", "email": "dup@example.com"})

    assert store.fetch_one("profiles", {"email": "dup@example.com"})["username"] == "ana"
