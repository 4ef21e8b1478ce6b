"""End-to-end tests for the HTTP API."""

import pytest

from quizboard.models import Profile, UserQuizAttempt
from quizboard.stores.identity import USER_ID_HEADER
from quizboard.utils.cache import CacheService


QUESTIONS = [
    {"id": "q1", "question_text": "Capital of France?", "options": ["Lyon", "Paris"], "correct_answer_index": 1,
     "hint": "Eiffel tower"},
    {"id": "q2", "question_text": "2 + 2 = 4", "question_type": "true_false",
     "options": [{"id": "t", "option_text": "True", "is_correct": True}, {"id": "f", "option_text": "False"}]},
    {"id": "q3", "question_text": "Capital of Italy?", "question_type": "short_answer",
     "correct_answer_text": "Rome"},
]


@pytest.fixture
def quiz_id(make_quiz):
    return make_quiz(QUESTIONS, title="Geography", pass_score=2)


@pytest.fixture
def learner(make_profile):
    return make_profile(username="ana", bonus_point=40)


def start(client, quiz_id, headers=None):
    response = client.post(f"/api/quizzes/{quiz_id}/sessions", headers=headers or {})
    assert response.status_code == 201
    return response.json()


def answer(client, session_id, question_id, value, headers=None, **extra):
    return client.put(
        f"/api/sessions/{session_id}/answers/{question_id}",
        json={"value": value, **extra},
        headers=headers or {},
    )


def take_quiz(client, quiz_id, answers, headers=None):
    session = start(client, quiz_id, headers)
    sid = session["session_id"]
    response = None
    for question_id, value in answers:
        assert answer(client, sid, question_id, value, headers).status_code == 200
        response = client.post(f"/api/sessions/{sid}/next", headers=headers or {})
        assert response.status_code == 200
    return sid, response.json()


def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["database"]["connected"] is True
    assert body["redis"]["connected"] is True


def test_health_is_degraded_without_redis(client, fake_redis):
    fake_redis.fail = True

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["redis"]["status"] == "unhealthy"


def test_list_quizzes(client, make_quiz, quiz_id):
    make_quiz([{"options": ["A"]}], title="Another")

    body = client.get("/api/quizzes", params={"page_size": 1}).json()

    assert body["total"] == 2
    assert len(body["items"]) == 1
    assert body["page"] == 1


def test_quiz_view_hides_correctness(client, quiz_id):
    body = client.get(f"/api/quizzes/{quiz_id}").json()

    assert [q["id"] for q in body["questions"]] == ["q1", "q2", "q3"]
    assert body["questions"][0]["options"] == [
        {"id": "q1-option-0", "option_text": "Lyon"},
        {"id": "q1-option-1", "option_text": "Paris"},
    ]
    assert "is_correct" not in str(body)
    assert "Rome" not in str(body)


def test_unknown_quiz_is_404(client):
    assert client.get("/api/quizzes/nope").status_code == 404
    response = client.post("/api/quizzes/nope/sessions")
    assert response.status_code == 404
    assert response.json()["message"] == "Quiz not found"


def test_quiz_without_questions_cannot_be_started(client, make_quiz):
    empty_id = make_quiz([], title="Empty")

    assert client.post(f"/api/quizzes/{empty_id}/sessions").status_code == 422


def test_session_starts_on_first_question(client, quiz_id):
    session = start(client, quiz_id)

    assert session["state"] == "presenting"
    assert session["cursor"] == 0
    assert session["current_question"]["id"] == "q1"
    assert session["can_advance"] is False


def test_next_is_blocked_until_answered(client, quiz_id):
    sid = start(client, quiz_id)["session_id"]

    response = client.post(f"/api/sessions/{sid}/next")

    assert response.status_code == 409
    assert client.get(f"/api/sessions/{sid}").json()["cursor"] == 0


def test_answer_overwrites_previous_answer(client, quiz_id):
    sid = start(client, quiz_id)["session_id"]

    answer(client, sid, "q1", "q1-option-0")
    body = answer(client, sid, "q1", "q1-option-1").json()

    assert body["current_answer"] == "q1-option-1"
    assert body["can_advance"] is True


def test_full_passing_run_records_attempt_and_bonus(client, db, quiz_id, learner):
    headers = {USER_ID_HEADER: learner}

    sid, body = take_quiz(client, quiz_id, [("q1", "q1-option-1"), ("q2", "t"), ("q3", "rome")], headers)

    results = body["session"]["results"]
    assert body["session"]["state"] == "results"
    assert results["score"] == 3
    assert results["is_passed"] is True
    assert results["message"] == "You Passed!"
    assert body["submission"] == {
        "recorded": True,
        "attempt_id": db.query(UserQuizAttempt).one().id,
        "bonus_awarded": True,
        "bonus_points": 10,
        "already_submitted": False,
    }
    db.expire_all()
    assert db.get(Profile, learner).bonus_point == 50


def test_failing_run_shows_hints_and_awards_nothing(client, db, quiz_id, learner):
    headers = {USER_ID_HEADER: learner}

    _, body = take_quiz(client, quiz_id, [("q1", "q1-option-0"), ("q2", "t"), ("q3", "Milan")], headers)

    results = body["session"]["results"]
    assert results["score"] == 1
    assert results["is_passed"] is False
    assert results["feedback"]["q1"] == {"is_correct": False, "hint": "Eiffel tower"}
    assert body["submission"]["recorded"] is True
    assert body["submission"]["bonus_awarded"] is False
    db.expire_all()
    assert db.get(Profile, learner).bonus_point == 40


def test_anonymous_run_is_scored_not_recorded(client, db, quiz_id):
    _, body = take_quiz(client, quiz_id, [("q1", "q1-option-1"), ("q2", "t"), ("q3", "Rome")])

    assert body["session"]["results"]["score"] == 3
    assert body["submission"]["recorded"] is False
    assert db.query(UserQuizAttempt).count() == 0


def test_retake_resets_and_rejects_stale_generation(client, quiz_id):
    sid, _ = take_quiz(client, quiz_id, [("q1", "q1-option-1"), ("q2", "t"), ("q3", "Rome")])

    body = client.post(f"/api/sessions/{sid}/retake").json()

    assert body["cursor"] == 0
    assert body["generation"] == 2
    assert body["current_answer"] is None
    assert body["results"] is None
    assert answer(client, sid, "q1", "q1-option-1", generation=1).status_code == 409
    assert answer(client, sid, "q1", "q1-option-1", generation=2).status_code == 200


def test_unknown_session_is_404(client):
    assert client.get("/api/sessions/does-not-exist").status_code == 404


def test_sessions_unavailable_without_redis(client, quiz_id, fake_redis):
    fake_redis.fail = True

    assert client.post(f"/api/quizzes/{quiz_id}/sessions").status_code == 503


def test_leaderboard_ranks_by_bonus_points(client, db, quiz_id, make_profile):
    leader = make_profile(username="leader", bonus_point=50)
    runner = make_profile(username="runner", bonus_point=5)
    for user_id, score in [(leader, 8), (leader, 6), (runner, 10)]:
        db.add(UserQuizAttempt(user_id=user_id, quiz_id=quiz_id, score_obtained=score, is_passed=score > 7))
    db.commit()

    body = client.get("/api/leaderboard").json()

    assert body["total_users"] == 2
    first, second = body["entries"]
    assert (first["rank"], first["username"], first["average_score"]) == (1, "leader", 7.0)
    assert (second["rank"], second["username"], second["average_score"]) == (2, "runner", 10.0)
    assert first["total_passed_quizzes"] == 1


def test_history_and_summary_require_a_user(client):
    assert client.get("/api/users/me/history").status_code == 401
    assert client.get("/api/users/me/summary").status_code == 401


def test_history_and_summary(client, quiz_id, learner):
    headers = {USER_ID_HEADER: learner}
    take_quiz(client, quiz_id, [("q1", "q1-option-1"), ("q2", "t"), ("q3", "Rome")], headers)

    history = client.get("/api/users/me/history", headers=headers).json()
    summary = client.get("/api/users/me/summary", headers=headers).json()

    assert history["user_id"] == learner
    assert [(a["quiz_title"], a["score_obtained"], a["is_passed"]) for a in history["attempts"]] == [
        ("Geography", 3, True)
    ]
    assert summary["bonus_points"] == 50
    assert summary["total_attempts"] == 1
    assert summary["achievement"]["title"] == "Knowledge Seeker"


def answer_all_but_submit(client, quiz_id, headers):
    """Start a run, answer every question correctly and stop before the final Next."""
    sid = start(client, quiz_id, headers)["session_id"]
    for question_id, value in [("q1", "q1-option-1"), ("q2", "t")]:
        answer(client, sid, question_id, value, headers)
        client.post(f"/api/sessions/{sid}/next", headers=headers)
    answer(client, sid, "q3", "Rome", headers)
    return sid


def test_results_survive_a_failed_snapshot_write_and_retry_records_once(
    client, db, quiz_id, learner, fake_redis
):
    headers = {USER_ID_HEADER: learner}
    sid = answer_all_but_submit(client, quiz_id, headers)

    fake_redis.setex_failures = 1
    first = client.post(f"/api/sessions/{sid}/next", headers=headers)
    retry = client.post(f"/api/sessions/{sid}/next", headers=headers)

    assert first.status_code == 200
    assert first.json()["session"]["results"]["score"] == 3
    assert first.json()["submission"]["recorded"] is True
    assert retry.status_code == 200
    assert retry.json()["session"]["results"]["score"] == 3
    assert retry.json()["submission"]["recorded"] is False
    assert retry.json()["submission"]["already_submitted"] is True
    assert db.query(UserQuizAttempt).count() == 1
    db.expire_all()
    assert db.get(Profile, learner).bonus_point == 50


def test_concurrent_submits_of_the_same_run_record_once(client, db, quiz_id, learner, fake_redis):
    headers = {USER_ID_HEADER: learner}
    sid = answer_all_but_submit(client, quiz_id, headers)
    key = CacheService.session_key(sid)
    snapshot_before_submit = fake_redis.data[key]

    first = client.post(f"/api/sessions/{sid}/next", headers=headers)
    # the second request read the snapshot before the first one saved its results
    fake_redis.data[key] = snapshot_before_submit
    second = client.post(f"/api/sessions/{sid}/next", headers=headers)

    assert first.json()["submission"]["bonus_awarded"] is True
    assert second.json()["submission"]["bonus_awarded"] is False
    assert second.json()["submission"]["already_submitted"] is True
    assert db.query(UserQuizAttempt).count() == 1
    db.expire_all()
    assert db.get(Profile, learner).bonus_point == 50


def test_retaken_run_is_recorded_again(client, db, quiz_id, learner):
    headers = {USER_ID_HEADER: learner}
    sid, _ = take_quiz(client, quiz_id, [("q1", "q1-option-1"), ("q2", "t"), ("q3", "Rome")], headers)

    client.post(f"/api/sessions/{sid}/retake", headers=headers)
    for question_id, value in [("q1", "q1-option-1"), ("q2", "t"), ("q3", "Rome")]:
        answer(client, sid, question_id, value, headers)
        body = client.post(f"/api/sessions/{sid}/next", headers=headers).json()

    assert body["submission"]["recorded"] is True
    assert db.query(UserQuizAttempt).count() == 2


def test_attempt_is_credited_to_the_user_who_started_it(client, db, quiz_id, learner, make_profile):
    other = make_profile(username="bo")
    sid = answer_all_but_submit(client, quiz_id, {USER_ID_HEADER: learner})

    client.post(f"/api/sessions/{sid}/next", headers={USER_ID_HEADER: other})

    attempt = db.query(UserQuizAttempt).one()
    assert attempt.user_id == learner
    db.expire_all()
    assert db.get(Profile, other).bonus_point == 0
