"""HTTP contract tests for the habits, scores and leaderboard routers."""

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from habitscore.main import app


@pytest.fixture
def client():
    return TestClient(app)


def _headers(user_id: str = "u1") -> dict:
    return {"X-User-Id": user_id}


class TestCompletionEndpoints:
    def test_toggle_created_then_flipped(self, client, seed):
        (habit_id,) = seed.habits("u1", "read")

        created = client.post(f"/v1/habits/{habit_id}/complete", headers=_headers(), json={"date": "2025-03-10"})
        assert created.status_code == 201
        data = created.json()["data"]
        assert data["completed"] is True
        assert data["date"] == "2025-03-10"
        assert data["score"]["score"] == 100
        assert data["score"]["percentage"] == 100

        flipped = client.post(f"/v1/habits/{habit_id}/complete", headers=_headers(), json={"date": "2025-03-10"})
        assert flipped.status_code == 200
        assert flipped.json()["data"]["completed"] is False
        assert flipped.json()["data"]["score"]["score"] == 0

    def test_toggle_unknown_habit(self, client):
        resp = client.post("/v1/habits/nope/complete", headers=_headers(), json={"date": "2025-03-10"})
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_completion_range(self, client, seed):
        (habit_id,) = seed.habits("u1", "read")
        client.post(f"/v1/habits/{habit_id}/complete", headers=_headers(), json={"date": "2025-03-10", "notes": "ok"})

        resp = client.get(
            "/v1/habits/completions/range",
            headers=_headers(),
            params={"startDate": "2025-03-01", "endDate": "2025-03-31"},
        )
        assert resp.status_code == 200
        records = resp.json()["data"]
        assert len(records) == 1
        assert records[0]["habit_id"] == habit_id
        assert records[0]["notes"] == "ok"

    def test_completion_rates(self, client, seed):
        (habit_id,) = seed.habits("u1", "read")
        seed.complete("u1", habit_id, date(2025, 3, 1))

        resp = client.get("/v1/habits/completion-rates", headers=_headers(), params={"year": 2025, "month": 3})
        assert resp.status_code == 200
        (rate,) = resp.json()["data"]
        assert rate["completion_rate"] == 100

    def test_completion_rates_bad_month(self, client):
        resp = client.get("/v1/habits/completion-rates", headers=_headers(), params={"year": 2025, "month": 13})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"


class TestScoreEndpoints:
    def test_range_and_stats(self, client, seed):
        a, b = seed.habits("u1", "A", "B")
        for habit_id in (a, b):
            client.post(f"/v1/habits/{habit_id}/complete", headers=_headers(), json={"date": "2025-03-01"})
        client.post(f"/v1/habits/{a}/complete", headers=_headers(), json={"date": "2025-03-02"})

        params = {"startDate": "2025-03-01", "endDate": "2025-03-31"}
        scores = client.get("/v1/scores/range", headers=_headers(), params=params).json()["data"]
        assert [(s["date"], s["score"]) for s in scores] == [("2025-03-01", 200), ("2025-03-02", 100)]

        stats = client.get("/v1/scores/stats", headers=_headers(), params=params).json()["data"]
        assert stats["total_score"] == 300
        assert stats["average_score"] == 150
        assert stats["average_percentage"] == 75
        assert stats["best_day"]["date"] == "2025-03-01"
        assert stats["current_streak"] == 0
        assert stats["longest_streak"] == 1

    def test_stats_empty_range(self, client):
        resp = client.get(
            "/v1/scores/stats",
            headers=_headers(),
            params={"startDate": "2025-03-01", "endDate": "2025-03-31"},
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["total_score"] == 0
        assert data["best_day"] is None
        assert data["scores"] == []

    def test_range_requires_dates(self, client):
        resp = client.get("/v1/scores/range", headers=_headers(), params={"startDate": "2025-03-01"})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "endDate is required"

    def test_recalculate(self, client, seed):
        (habit_id,) = seed.habits("u1", "A")
        seed.complete("u1", habit_id, date(2025, 3, 2))

        resp = client.post(
            "/v1/scores/recalculate",
            headers=_headers(),
            json={"startDate": "2025-03-01", "endDate": "2025-03-03"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Scores recalculated successfully"
        assert [s["score"] for s in body["data"]] == [0, 100, 0]

    def test_recalculate_inverted_range(self, client):
        resp = client.post(
            "/v1/scores/recalculate",
            headers=_headers(),
            json={"startDate": "2025-03-03", "endDate": "2025-03-01"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"


class TestLeaderboardEndpoints:
    def test_caller_registered_and_ranked(self, client, seed):
        (habit_id,) = seed.habits("u1", "A")
        today = datetime.now(timezone.utc).date().isoformat()
        client.post(f"/v1/habits/{habit_id}/complete", headers=_headers(), json={"date": today})

        resp = client.get("/v1/leaderboard", headers=_headers("viewer"))
        assert resp.status_code == 200
        entries = resp.json()["data"]["entries"]
        assert [(e["rank"], e["user_id"], e["score"]) for e in entries] == [(1, "u1", 100), (2, "viewer", 0)]

    def test_user_month_stats(self, client, seed):
        seed.user("buddy", "Buddy")
        resp = client.get("/v1/users/buddy/stats", headers=_headers())
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["user"]["display_name"] == "Buddy"
        assert data["stats"]["total_score"] == 0

    def test_user_month_stats_unknown_user(self, client):
        resp = client.get("/v1/users/ghost/stats", headers=_headers())
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "User not found"
