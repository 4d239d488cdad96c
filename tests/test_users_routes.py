from conftest import TEST_USER_ID, auth_headers
from database import models
from generation.usage_tracker import increment_usage

OTHER_USER_ID = "7d4c1f0e-0000-4000-8000-000000000002"


def _save(client, **overrides):
    body = {"topic": "MERN", "difficulty": "Medium", "totalQuestions": 10, "correctAnswers": 8}
    body.update(overrides)
    return client.post("/api/quiz-results", json=body, headers=auth_headers())


def test_subscription_defaults_to_free(client):
    resp = client.get(f"/api/user/subscription/{TEST_USER_ID}", headers=auth_headers())

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["subscription"]["tier"] == "free"
    assert body["subscription"]["status"] == "active"
    assert body["subscription"]["user_id"] == TEST_USER_ID


def test_usage_reports_remaining_quota(client, db_session):
    increment_usage(db_session, TEST_USER_ID)
    increment_usage(db_session, TEST_USER_ID)

    resp = client.get(f"/api/user/usage/{TEST_USER_ID}", headers=auth_headers())

    assert resp.status_code == 200
    assert resp.json()["usage"] == {
        "tier": "free",
        "quizzesToday": 2,
        "dailyLimit": 5,
        "remaining": 3,
        "canGenerate": True,
        "isUnlimited": False,
    }


def test_other_users_data_is_forbidden(client):
    for path in ("subscription", "usage", "profile"):
        resp = client.get(f"/api/user/{path}/{OTHER_USER_ID}", headers=auth_headers())
        assert resp.status_code == 403


def test_requires_authentication(client):
    assert client.get(f"/api/user/usage/{TEST_USER_ID}").status_code == 401


def test_save_result_then_profile(client):
    first = _save(client, timeTakenSeconds=125)
    assert first.status_code == 201
    assert first.json()["score_percentage"] == 80.0

    _save(client, topic="UPSC", difficulty="Hard", totalQuestions=5, correctAnswers=2, timeTakenSeconds=40)

    resp = client.get(f"/api/user/profile/{TEST_USER_ID}", headers=auth_headers())

    assert resp.status_code == 200
    body = resp.json()
    stats = body["stats"]
    assert stats["total_quizzes"] == 2
    assert stats["best_score"] == 80.0
    assert stats["worst_score"] == 40.0
    assert stats["average_score"] == 60.0
    assert stats["current_streak"] == 1
    assert stats["total_time_spent_seconds"] == 165
    assert stats["total_time_spent_display"] == "2m"
    assert [q["topic"] for q in body["recentQuizzes"]] == ["UPSC", "MERN"]


def test_profile_for_new_user_is_empty(client):
    resp = client.get(f"/api/user/profile/{TEST_USER_ID}", headers=auth_headers())

    assert resp.status_code == 200
    body = resp.json()
    assert body["stats"]["total_quizzes"] == 0
    assert body["stats"]["total_time_spent_display"] == "0s"
    assert body["recentQuizzes"] == []


def test_correct_answers_above_total_is_422(client):
    resp = _save(client, totalQuestions=3, correctAnswers=4)

    assert resp.status_code == 422


def _profile_headers():
    return auth_headers(
        email="meera@example.com",
        user_metadata={"full_name": "Meera Iyer", "avatar_url": "https://cdn.example.com/m.png"},
        app_metadata={"provider": "email"},
    )


def test_profile_record_is_created_on_first_read(client, db_session):
    resp = client.get(f"/api/user/profile/{TEST_USER_ID}", headers=_profile_headers())

    assert resp.status_code == 200
    profile = resp.json()["profile"]
    assert profile["user_id"] == TEST_USER_ID
    assert profile["email"] == "meera@example.com"
    assert profile["full_name"] == "Meera Iyer"
    assert profile["avatar_url"] == "https://cdn.example.com/m.png"
    assert profile["signup_source"] == "email"
    assert profile["onboarding_completed"] is False
    assert profile["metadata"] == {}
    assert profile["last_active_at"] is not None
    assert db_session.query(models.UserProfile).count() == 1


def test_patch_profile_updates_preferences(client):
    resp = client.patch(
        f"/api/user/profile/{TEST_USER_ID}",
        json={"language": "hi", "country_code": "IN", "product_updates": False, "metadata": {"exam": "NDA"}},
        headers=_profile_headers(),
    )

    assert resp.status_code == 200
    profile = resp.json()["profile"]
    assert profile["language"] == "hi"
    assert profile["country_code"] == "IN"
    assert profile["product_updates"] is False
    assert profile["metadata"] == {"exam": "NDA"}
    assert profile["full_name"] == "Meera Iyer"

    again = client.get(f"/api/user/profile/{TEST_USER_ID}", headers=_profile_headers()).json()["profile"]
    assert again["language"] == "hi"


def test_patch_profile_rejects_unknown_or_invalid_fields(client):
    for body in ({"email": "someone@else.com"}, {"country_code": "IND"}):
        resp = client.patch(f"/api/user/profile/{TEST_USER_ID}", json=body, headers=_profile_headers())
        assert resp.status_code == 422


def test_patch_other_users_profile_is_forbidden(client):
    resp = client.patch(f"/api/user/profile/{OTHER_USER_ID}", json={"language": "hi"}, headers=auth_headers())

    assert resp.status_code == 403


def test_complete_onboarding(client):
    resp = client.post(f"/api/user/profile/{TEST_USER_ID}/onboarding", headers=_profile_headers())

    assert resp.status_code == 200
    assert resp.json()["profile"]["onboarding_completed"] is True
