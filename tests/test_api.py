import pytest
from fastapi.testclient import TestClient

from sahaayak.api.app import create_app
from sahaayak.config import AppConfig
from sahaayak.core.database import MemoryRecordStore
from sahaayak.core.session import TurnInProgressError

from conftest import ScriptedOracle

USER = {"X-User-Id": "api-user"}

@pytest.fixture
def oracle():
    return ScriptedOracle(reply="I'm listening.\n[QUICK_REPLIES:Go on|Thanks]")

@pytest.fixture
def client(oracle):
    app = create_app(store=MemoryRecordStore(), oracle=oracle, app_config=AppConfig())
    with TestClient(app) as test_client:
        yield test_client

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body['service'] == "sahaayak"
    assert body['data']['oracle']['status'] == "healthy"

def test_chat_turn(client):
    response = client.post("/api/chat", json={"message": "hello"}, headers=USER)

    assert response.status_code == 200
    body = response.json()
    assert body['text'] == "I'm listening."
    assert body['quick_replies'] == ["Go on", "Thanks"]
    assert body['is_crisis'] is False

    history = client.get("/api/chat/history", headers=USER).json()
    assert history['total'] == 2

def test_crisis_turn(client, oracle):
    oracle.replies['crisis'] = "high"

    body = client.post("/api/chat", json={"message": "no way out"}, headers=USER).json()

    assert body['is_crisis'] is True
    assert body['persona_used'] == "empathetic"
    assert client.get("/api/chat/history", headers=USER).json()['total'] == 1

def test_empty_message_rejected(client):
    assert client.post("/api/chat", json={"message": ""}, headers=USER).status_code == 422

def test_turn_in_progress_maps_to_conflict(client, monkeypatch):
    async def busy(self, text):
        raise TurnInProgressError("A message is already being answered")

    monkeypatch.setattr("sahaayak.core.session.AppSession.submit_message", busy)
    response = client.post("/api/chat", json={"message": "hi"}, headers=USER)
    assert response.status_code == 409

def test_draft_screening(client, oracle):
    oracle.replies['crisis'] = "high"
    short = client.post("/api/chat/screen", json={"text": "bad day"}).json()
    long = client.post("/api/chat/screen", json={"text": "I don't want to be here anymore"}).json()

    assert short['screened'] is False
    assert long['show_distress_banner'] is True

def test_moderate_endpoint(client, oracle):
    oracle.replies['moderation'] = '{"is_safe": false, "reason": "Be kind."}'
    assert client.post("/api/moderate", json={"text": "mean"}).json() == {'is_safe': False, 'reason': "Be kind."}

def test_mood_and_streaks(client):
    response = client.post("/api/mood", json={"mood": "🙂", "on_date": "2026-10-12"}, headers=USER)
    assert response.json()['success'] is True

    streaks = client.get("/api/streaks", headers=USER).json()
    assert streaks['mood_tracking']['count'] == 1

    badges = client.get("/api/badges", headers=USER).json()
    assert [b['badge_id'] for b in badges['earned']] == ["first_mood"]
    assert [b['badge_id'] for b in badges['new']] == ["first_mood"]

def test_invalid_mood_is_422(client):
    assert client.post("/api/mood", json={"mood": "banana"}, headers=USER).status_code == 422

def test_guest_mutation_is_noop(client):
    body = client.post("/api/journal", json={"content": "hi", "mood": "🙂"}).json()
    assert body == {'success': False, 'record': None}

def test_journey_flow(client):
    journey = "digital_detox_journey"
    assert client.post(f"/api/journeys/{journey}/start", headers=USER).json()['success']

    client.post(f"/api/journeys/{journey}/tasks", json={"day": 1, "task_id": "dd_d1_t1"}, headers=USER)
    client.post(f"/api/journeys/{journey}/advance", headers=USER)

    details = client.get(f"/api/journeys/{journey}", headers=USER).json()
    assert details['progress']['current_day'] == 2
    assert details['progress']['completed_tasks_by_day'] == {'1': ["dd_d1_t1"]}

def test_unknown_journey_is_404(client):
    assert client.post("/api/journeys/nope/start", headers=USER).status_code == 404

def test_intentions(client):
    created = client.post("/api/intentions", json={"title": "Read", "frequency": "weekly", "target": 2},
                          headers=USER).json()
    intention_id = created['record']['intention_id']

    client.post(f"/api/intentions/{intention_id}/complete", json={}, headers=USER)
    listed = client.get("/api/intentions", headers=USER).json()['intentions']

    assert listed[0]['progress'] == 1
    assert client.post("/api/intentions/missing/complete", json={}, headers=USER).status_code == 404

def test_community_post_and_comment(client):
    post = client.post("/api/community/posts", json={
        "circle_id": "university_life", "title": "Hostel food", "content": "Any tips?"
    }, headers=USER).json()
    assert post['success'] is True

    post_id = post['record']['post_id']
    comment = client.post("/api/community/comments", json={"post_id": post_id, "content": "Carry snacks"},
                          headers=USER).json()
    assert comment['message'] == "Comment added successfully."

    liked = client.post(f"/api/community/posts/{post_id}/like", headers=USER).json()
    assert liked['record']['likes'] == ["api-user"]

def test_guest_cannot_post(client):
    body = client.post("/api/community/posts", json={
        "circle_id": "university_life", "title": "t", "content": "c"
    }).json()
    assert body['success'] is False

def test_settings_roundtrip(client):
    client.put("/api/settings", json={"selected_persona": "coach", "dynamic_persona_enabled": False}, headers=USER)
    assert client.get("/api/settings", headers=USER).json() == {
        'selected_persona': "coach", 'dynamic_persona_enabled': False
    }

def test_export_and_clear(client):
    client.post("/api/emergency/contacts", json={"name": "Ma", "phone": "98765"}, headers=USER)
    exported = client.get("/api/export", headers=USER).json()
    assert exported['emergency_contacts'][0]['name'] == "Ma"

    assert client.delete("/api/data", headers=USER).json()['removed'] >= 1
    assert client.get("/api/emergency/contacts", headers=USER).json()['contacts'] == []
    assert client.get("/api/export").status_code == 401

def test_helplines(client):
    helplines = client.get("/api/emergency/helplines").json()['helplines']
    assert helplines[0]['number'] == "1800-599-0019"
