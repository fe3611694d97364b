"""
Test the REST surface end to end with FastAPI's TestClient against an
offline factory and a throwaway SQLite file.
"""

import pytest
from fastapi.testclient import TestClient

from adapters.rest.app import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "offline")
    monkeypatch.setenv("DB_PATH", str(tmp_path / "api_test.db"))
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"]


def test_default_user_is_seeded(client):
    response = client.get("/api/user/1")
    assert response.status_code == 200
    assert response.json()["name"] == "Alex"
    assert client.get("/api/user/999").status_code == 404


def test_stressed_mood_runs_collaborators(client):
    response = client.post("/api/mood", json={"mood": "  Stressed "})
    assert response.status_code == 200
    body = response.json()
    assert body["primary"]["agentName"] == "MoodMate"
    assert [c["agentName"] for c in body["collaborations"]] == ["NutriCoach", "FlexGenie", "MindPal"]

    moods = client.get("/api/mood/1").json()
    assert [m["mood"] for m in moods] == ["stressed"]
    assert client.get("/api/user/1").json()["current_mood"] == "stressed"


def test_mood_is_validated(client):
    assert client.post("/api/mood", json={"mood": ""}).status_code == 422


def test_journal_round_trip(client):
    response = client.post("/api/journal", json={"content": "Cooked dinner with friends tonight"})
    assert response.status_code == 200
    entry_id = response.json()["entry_id"]

    entries = client.get("/api/journal/1").json()
    assert entries[0]["id"] == entry_id
    assert entries[0]["prompt"] == "Daily reflection"


def test_agent_status_lists_all_agents(client):
    status = client.get("/api/agents/status", params={"user_id": 1}).json()
    assert [a["name"] for a in status] == ["MoodMate", "NutriCoach", "FlexGenie", "MindPal", "InsightBot"]
    assert status[0]["memory"]["executionCount"] == 0


def test_run_agent(client):
    response = client.post("/api/agents/FlexGenie/run", json={"input": {"currentMood": "tired"}})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["output"]["workoutPlan"]["source"] == "fallback"


def test_unknown_agent_is_404(client):
    response = client.post("/api/agents/Nobody/run", json={})
    assert response.status_code == 404
    assert response.json()["detail"] == "Agent Nobody not found"
    assert client.post("/api/agents/Nobody/chat", json={"message": "hi"}).status_code == 404


def test_blank_chat_message_is_400(client):
    assert client.post("/api/agents/MoodMate/chat", json={"message": "   "}).status_code == 400


def test_chat_with_mood_update(client):
    response = client.post(
        "/api/agents/MoodMate/chat",
        json={
            "message": "I'm feeling tired",
            "conversation_history": [{"role": "user", "content": "hey"}],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["response"]
    assert body["actions"][0]["type"] == "mood_update"


def test_recommendations_listing_and_deactivation(client):
    client.post("/api/agents/NutriCoach/run", json={"input": {"currentMood": "calm"}})

    recommendations = client.get("/api/agents/NutriCoach/recommendations/1").json()
    assert len(recommendations) == 1
    assert recommendations[0]["type"] == "nutrition"

    rec_id = recommendations[0]["id"]
    response = client.post(f"/api/recommendations/{rec_id}/deactivate")
    assert response.json() == {"success": True, "id": rec_id}
    assert client.get("/api/agents/NutriCoach/recommendations/1").json() == []
    assert client.post("/api/recommendations/9999/deactivate").status_code == 404


def test_wellness_metrics(client):
    response = client.post("/api/wellness-metrics", json={"energy_level": 6, "stress_level": 3})
    assert response.status_code == 200
    assert response.json()["energy_level"] == 6

    metrics = client.get("/api/wellness-metrics/1", params={"days": 7}).json()
    assert [m["stress_level"] for m in metrics] == [3]
    assert client.post("/api/wellness-metrics", json={"energy_level": 11}).status_code == 422


def test_insights(client):
    response = client.get("/api/insights/1")
    assert response.status_code == 200
    assert response.json()["agentName"] == "InsightBot"
