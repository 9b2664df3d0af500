"""Smoke tests for API routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lecture_quest.api.routes import router
from lecture_quest.progression.catalog import ACHIEVEMENT_DEFINITIONS


@pytest.fixture
def mock_settings(tmp_path):
    settings = MagicMock()
    settings.data_dir = tmp_path
    settings.daily_quiz_limit = 10
    settings.app_secret = None
    return settings


@pytest.fixture
def client(mock_settings):
    app = FastAPI()
    app.include_router(router)
    with patch("lecture_quest.api.routes.get_settings", return_value=mock_settings):
        with TestClient(app) as c:
            yield c


LECTURE_QUIZ = {
    "correct_count": 8,
    "total_questions": 10,
    "topic_scores": {"Recursion": 90, "Pointers": 40},
    "incorrect_topics": ["Pointers"],
    "lecture_id": "lec-1",
    "lecture_title": "Algorithms",
}


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestProfile:
    def test_new_learner_profile(self, client):
        response = client.get("/api/learners/ada/profile")
        assert response.status_code == 200
        data = response.json()
        assert data["total_xp"] == 0
        assert data["level"] == 1
        assert data["progress"]["title"] == "Knowledge Novice"
        assert "achievements" not in data

    def test_invalid_user_id(self, client):
        response = client.get("/api/learners/bad.user/profile")
        assert response.status_code == 400

    def test_new_learner_sees_full_catalog(self, client):
        data = client.get("/api/learners/ada/achievements").json()
        assert data["total"] == len(ACHIEVEMENT_DEFINITIONS)
        assert data["unlocked"] == 0

    def test_reset(self, client):
        client.post("/api/learners/ada/quizzes", json=LECTURE_QUIZ)
        response = client.post("/api/learners/ada/reset")
        assert response.status_code == 200
        assert client.get("/api/learners/ada/profile").json()["total_xp"] == 0
        assert client.get("/api/learners/ada/reviews").json() == {"events": []}


class TestQuizzes:
    def test_submit_lecture_quiz(self, client):
        response = client.post("/api/learners/ada/quizzes", json=LECTURE_QUIZ)
        assert response.status_code == 200
        data = response.json()
        assert data["quiz_xp"] == 130
        assert data["total_xp"] == data["xp_earned"]
        assert data["current_streak"] == 1
        unlocked = {a["id"] for a in data["newly_unlocked"]}
        assert {"first_steps", "first_lecture", "first_quiz"} <= unlocked

        achievements = client.get("/api/learners/ada/achievements").json()
        assert achievements["unlocked"] >= 3
        reviews = client.get("/api/learners/ada/reviews", params={"topic": "Pointers"}).json()
        assert [e["score"] for e in reviews["events"]] == [40]

    def test_invalid_submission(self, client):
        body = dict(LECTURE_QUIZ, correct_count=20)
        response = client.post("/api/learners/ada/quizzes", json=body)
        assert response.status_code == 422

    def test_unknown_plan(self, client):
        body = {"correct_count": 1, "total_questions": 2, "plan_id": "nope"}
        response = client.post("/api/learners/ada/quizzes", json=body)
        assert response.status_code == 400


class TestDailyQuiz:
    def test_no_topics(self, client):
        response = client.post("/api/learners/ada/daily-quiz")
        assert response.status_code == 400

    def test_generate_and_submit(self, client):
        client.post("/api/learners/ada/quizzes", json=LECTURE_QUIZ)
        response = client.post("/api/learners/ada/daily-quiz")
        assert response.status_code == 200
        plan = response.json()
        assert "Pointers" in [t["topic"] for t in plan["topics"]]

        status = client.get("/api/learners/ada/daily-quiz/status").json()
        assert status["has_active_plan"]
        assert status["plan"]["id"] == plan["id"]

        body = {"correct_count": 4, "total_questions": 5, "plan_id": plan["id"]}
        response = client.post("/api/learners/ada/quizzes", json=body)
        assert response.status_code == 200
        status = client.get("/api/learners/ada/daily-quiz/status").json()
        assert not status["has_active_plan"]


class TestConfidence:
    def test_rate_lecture(self, client):
        client.post("/api/learners/ada/quizzes", json=LECTURE_QUIZ)
        response = client.post("/api/learners/ada/confidence", json={"lecture_id": "lec-1", "rating": 4})
        assert response.status_code == 200
        assert response.json()["average_confidence"] == 4.0

    def test_unknown_lecture(self, client):
        response = client.post("/api/learners/ada/confidence", json={"lecture_id": "nope", "rating": 4})
        assert response.status_code == 404

    def test_rating_out_of_range(self, client):
        response = client.post("/api/learners/ada/confidence", json={"lecture_id": "lec-1", "rating": 9})
        assert response.status_code == 422


class TestPowerUps:
    def test_spend_never_negative(self, client):
        response = client.post("/api/learners/ada/power-ups/hints/use")
        assert response.status_code == 200
        assert response.json()["hints"] == 0

    def test_unknown_kind(self, client):
        response = client.post("/api/learners/ada/power-ups/teleport/use")
        assert response.status_code == 400
