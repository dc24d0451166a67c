"""Tests for the stream HTTP API."""

import pytest
from fastapi.testclient import TestClient

from studio.main import create_app
from studio.orchestrator.session import SessionManager


@pytest.fixture
def api(collaborators, test_settings):
    """Client whose manager uses recording collaborators."""
    manager = SessionManager(
        registry=collaborators.registry(),
        max_sessions=2,
        telemetry_interval_s=3600.0,
    )
    app = create_app(settings=test_settings, session_manager=manager)
    with TestClient(app) as c:
        yield c


def create_stream(client: TestClient, **overrides) -> str:
    payload = {"avatar_id": "professional-female", "title": "Quantum Physics 101"}
    payload.update(overrides)
    response = client.post("/streams", json=payload)
    assert response.status_code == 201
    return response.json()["session_id"]


class TestStreamLifecycle:
    """Tests for create/start/pause/resume/stop."""

    def test_create(self, api):
        response = api.post(
            "/streams",
            json={"avatar_id": "casual-neutral", "visibility": "unlisted"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["state"] == "initializing"
        assert data["avatar"] == "Robin"
        assert data["config"]["visibility"] == "unlisted"
        assert data["status"]["url"] is None

    def test_full_lifecycle(self, api):
        session_id = create_stream(api)

        live = api.post(f"/streams/{session_id}/start").json()
        assert live["state"] == "live"
        assert live["url"] == f"https://stream.local/live/{session_id}"

        assert api.post(f"/streams/{session_id}/pause").json()["state"] == "paused"
        assert api.post(f"/streams/{session_id}/resume").json()["state"] == "live"
        assert api.post(f"/streams/{session_id}/stop").json()["state"] == "ended"

    def test_get_and_list(self, api):
        first = create_stream(api)
        create_stream(api)
        api.post(f"/streams/{first}/start")

        assert api.get(f"/streams/{first}").json()["state"] == "live"
        data = api.get("/streams", params={"state": "live"}).json()
        assert [s["session_id"] for s in data["sessions"]] == [first]
        assert data["active"] == 2

    def test_list_bad_state(self, api):
        assert api.get("/streams", params={"state": "napping"}).status_code == 422

    def test_unknown_session_404(self, api):
        response = api.post("/streams/session_missing/start")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "SessionNotFoundError"

    def test_unknown_avatar_502(self, api):
        response = api.post("/streams", json={"avatar_id": "ghost"})

        assert response.status_code == 502
        assert response.json()["error"]["type"] == "AvatarResolutionError"

    def test_invalid_config_422(self, api):
        response = api.post("/streams", json={"avatar_id": "x", "visibility": "secret"})

        assert response.status_code == 422

    def test_non_numeric_voice_setting_422(self, api):
        response = api.post(
            "/streams",
            json={
                "avatar_id": "professional-female",
                "voice_profile": {"settings": {"stability": "high"}},
            },
        )

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "InvalidConfigError"

    def test_session_limit_503(self, api):
        create_stream(api)
        create_stream(api)

        response = api.post("/streams", json={"avatar_id": "professional-male"})

        assert response.status_code == 503
        assert response.json()["error"]["recoverable"] is True

    def test_transport_failure_502(self, api, collaborators):
        session_id = create_stream(api)
        collaborators.transports[session_id].fail_next_publish = "ingest rejected"

        response = api.post(f"/streams/{session_id}/start")

        assert response.status_code == 502
        assert api.get(f"/streams/{session_id}").json()["state"] == "error"

    def test_start_after_stop_409(self, api):
        session_id = create_stream(api)
        api.post(f"/streams/{session_id}/stop")

        assert api.post(f"/streams/{session_id}/start").status_code == 409


class TestSettingsUpdates:
    def test_patch_before_live(self, api):
        session_id = create_stream(api)

        response = api.patch(f"/streams/{session_id}", json={"title": "Relativity"})

        assert response.status_code == 200
        assert response.json()["title"] == "Relativity"

    def test_patch_avatar_rejected(self, api):
        session_id = create_stream(api)

        response = api.patch(f"/streams/{session_id}", json={"avatar_id": "casual-neutral"})

        assert response.status_code == 422

    def test_patch_while_live_409(self, api):
        session_id = create_stream(api)
        api.post(f"/streams/{session_id}/start")

        assert api.patch(f"/streams/{session_id}", json={"title": "x"}).status_code == 409


class TestAvatarCommands:
    def test_gesture(self, api, collaborators):
        session_id = create_stream(api)
        api.post(f"/streams/{session_id}/start")

        response = api.post(f"/streams/{session_id}/gesture", json={"gesture_id": "wave"})

        assert response.status_code == 202
        assert response.json() == {"gesture": "wave", "animation": "greeting"}
        assert collaborators.agents[0].gestures == ["greeting"]

    def test_unknown_gesture_422(self, api):
        session_id = create_stream(api)

        response = api.post(f"/streams/{session_id}/gesture", json={"gesture_id": "dab"})

        assert response.status_code == 422

    def test_expression_before_live_409(self, api):
        session_id = create_stream(api)

        response = api.post(
            f"/streams/{session_id}/expression", json={"expression_id": "smile"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "SessionNotLiveError"

    def test_voice_command(self, api):
        session_id = create_stream(api)
        api.post(f"/streams/{session_id}/start")

        ok = api.post(f"/streams/{session_id}/commands", json={"text": "thumbs up"}).json()
        unknown = api.post(f"/streams/{session_id}/commands", json={"text": "sing"}).json()

        assert ok["success"] is True
        assert ok["data"]["animation"] == "approval"
        assert unknown == {
            "success": False,
            "action": "unknown",
            "data": None,
            "error": "Command not recognized",
        }


class TestFeatures:
    def test_subtitles(self, api, collaborators):
        session_id = create_stream(api)
        collaborators.recognizers[session_id].push("Hello class", line_id="l1")

        lines = api.get(f"/streams/{session_id}/subtitles").json()["lines"]

        assert [line["text"] for line in lines] == ["Hello class"]

    def test_toggle_subtitles(self, api, collaborators):
        session_id = create_stream(api)

        response = api.post(f"/streams/{session_id}/subtitles", json={"enabled": False})

        assert response.json() == {"subtitles": False}
        assert not collaborators.recognizers[session_id].is_listening

    def test_speak(self, api):
        session_id = create_stream(api)

        response = api.post(f"/streams/{session_id}/speak", json={"text": "Welcome"})

        assert response.status_code == 202

    def test_chat_requires_ai_chat(self, api):
        session_id = create_stream(api)

        response = api.post(f"/streams/{session_id}/chat", json={"text": "hi"})

        assert response.status_code == 409

    def test_chat(self, api):
        session_id = create_stream(api, features={"ai_chat": True})

        response = api.post(f"/streams/{session_id}/chat", json={"text": "What is spin?"})

        assert response.json()["response"] == "AI response to: What is spin?"

    def test_participants(self, api):
        session_id = create_stream(api)

        created = api.post(
            f"/streams/{session_id}/participants", json={"name": "Ada", "role": "moderator"}
        )
        assert created.status_code == 201
        participant_id = created.json()["id"]
        assert participant_id.startswith("participant_")

        removed = api.delete(f"/streams/{session_id}/participants/{participant_id}")
        assert removed.json() == {"removed": True}


class TestShutdown:
    def test_lifespan_ends_sessions(self, collaborators, test_settings):
        manager = SessionManager(registry=collaborators.registry(), telemetry_interval_s=3600.0)
        app = create_app(settings=test_settings, session_manager=manager)

        with TestClient(app) as client:
            session_id = create_stream(client)
            client.post(f"/streams/{session_id}/start")

        assert manager.get_session(session_id).state.value == "ended"
        assert collaborators.transports[session_id].unpublish_calls == 1
