"""Tests for the HTTP host."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from highlightwords.server import DEFAULT_DOCUMENT, create_app

if TYPE_CHECKING:
    from pathlib import Path

MARKUP = "<p>ab</p><p>cd</p>"

# Whole text node of each paragraph
SELECT_AB = {"anchor": [0, 0], "anchor_offset": 0, "focus": [0, 0], "focus_offset": 2}
SELECT_CD = {"anchor": [1, 0], "anchor_offset": 0, "focus": [1, 0], "focus_offset": 2}
# "a" after two emoji: UTF-16 offsets 4..5
SELECT_A_AFTER_EMOJI = {
    "anchor": [0, 0],
    "anchor_offset": 4,
    "focus": [0, 0],
    "focus_offset": 5,
}


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(MARKUP, task_description="Find the verbs"))


@pytest.fixture
def session_id(client: TestClient) -> str:
    return client.post("/api/sessions").json()["session_id"]


def _select(client: TestClient, session_id: str, **body: object) -> dict:
    client.post(f"/api/sessions/{session_id}/select-start", json={"timestamp": 0})
    response = client.post(f"/api/sessions/{session_id}/selection", json=body)
    assert response.status_code == 200
    return response.json()


class TestPage:
    def test_index(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert 'id="text-container"' in response.text


class TestSessions:
    def test_create_session(self, client: TestClient) -> None:
        view = client.post("/api/sessions").json()
        assert view["markup"] == MARKUP
        assert view["color"] == "rgb(252, 233, 0)"
        assert view["menu_open"] is False
        assert view["task_description"] == "Find the verbs"

    def test_sessions_are_independent(self, client: TestClient) -> None:
        first = client.post("/api/sessions").json()["session_id"]
        second = client.post("/api/sessions").json()["session_id"]
        assert first != second
        _select(client, first, **SELECT_AB)
        assert "<span" not in client.get(f"/api/sessions/{second}").json()["markup"]

    def test_unknown_session(self, client: TestClient) -> None:
        response = client.get("/api/sessions/nope")
        assert response.status_code == 404

    def test_default_document(self) -> None:
        client = TestClient(create_app())
        view = client.post("/api/sessions").json()
        assert view["markup"] == DEFAULT_DOCUMENT

    def test_document_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        doc = tmp_path / "doc.html"
        doc.write_text("<p>from file</p>", encoding="utf-8")
        monkeypatch.setenv("APP__DOCUMENT_PATH", str(doc))
        client = TestClient(create_app())
        assert client.post("/api/sessions").json()["markup"] == "<p>from file</p>"


class TestSelection:
    def test_cross_paragraph_selection(
        self, client: TestClient, session_id: str
    ) -> None:
        view = _select(
            client,
            session_id,
            anchor=[0, 0],
            anchor_offset=1,
            focus=[1, 0],
            focus_offset=1,
            text="bc",
        )
        assert view["changed"] is True
        span = '<span style="background-color: rgb(252, 233, 0);">'
        assert view["markup"] == f"<p>a{span}b</span></p><p>{span}c</span>d</p>"

    def test_endpoint_outside_container(
        self, client: TestClient, session_id: str
    ) -> None:
        view = _select(
            client, session_id, anchor=None, focus=[1, 0], focus_offset=1
        )
        assert view == {"changed": False, "markup": MARKUP}

    def test_path_leaving_tree(self, client: TestClient, session_id: str) -> None:
        view = _select(
            client, session_id, anchor=[9, 9], focus=[1, 0], focus_offset=1
        )
        assert view["changed"] is False

    def test_guard_rejects_rapid_start(
        self, client: TestClient, session_id: str
    ) -> None:
        url = f"/api/sessions/{session_id}/select-start"
        assert client.post(url, json={"timestamp": 0}).json() == {"accepted": True}
        assert client.post(url, json={"timestamp": 10}).json() == {"accepted": False}

    def test_remove_selection(self, client: TestClient, session_id: str) -> None:
        _select(client, session_id, **SELECT_AB)
        response = client.delete(f"/api/sessions/{session_id}/selections/1")
        assert response.json() == {"changed": True, "markup": MARKUP}


class TestColorAndMenu:
    def test_change_color(self, client: TestClient, session_id: str) -> None:
        view = client.post(
            f"/api/sessions/{session_id}/color", json={"color": "red"}
        ).json()
        assert view["color"] == "red"
        view = _select(client, session_id, **SELECT_CD)
        assert '<span style="background-color: red;">cd</span>' in view["markup"]

    def test_toggle_menu(self, client: TestClient, session_id: str) -> None:
        url = f"/api/sessions/{session_id}/menu"
        assert client.post(url).json()["menu_open"] is True
        assert client.post(url).json()["menu_open"] is False


class TestState:
    def test_state_round_trip(self, client: TestClient, session_id: str) -> None:
        client.post(f"/api/sessions/{session_id}/color", json={"color": "red"})
        selected = _select(client, session_id, **SELECT_AB)
        state = client.get(f"/api/sessions/{session_id}/state").json()
        assert state == {
            "color": "red",
            "selections": [{"start": 3, "end": 5, "color": "red"}],
        }

        other = client.post("/api/sessions").json()["session_id"]
        view = client.put(f"/api/sessions/{other}/state", json=state).json()
        assert view["markup"] == selected["markup"]
        assert view["color"] == "red"

    def test_invalid_state_rejected(self, client: TestClient, session_id: str) -> None:
        response = client.put(
            f"/api/sessions/{session_id}/state",
            json={"color": "red", "selections": [{"start": 5, "end": 1, "color": "x"}]},
        )
        assert response.status_code == 422


class TestAstralText:
    """The page sends UTF-16 offsets; emoji take two code units each."""

    MARKUP = "<p>\U0001f600\U0001f600ab</p>"

    @pytest.fixture
    def client(self) -> TestClient:
        return TestClient(create_app(self.MARKUP))

    def test_selection_after_emoji(self, client: TestClient, session_id: str) -> None:
        view = _select(client, session_id, **SELECT_A_AFTER_EMOJI, text="a")
        span = '<span style="background-color: rgb(252, 233, 0);">'
        assert view == {
            "changed": True,
            "markup": f"<p>\U0001f600\U0001f600{span}a</span>b</p>",
        }

    def test_remove_after_emoji(self, client: TestClient, session_id: str) -> None:
        _select(client, session_id, **SELECT_A_AFTER_EMOJI)
        response = client.delete(f"/api/sessions/{session_id}/selections/4")
        assert response.json() == {"changed": True, "markup": self.MARKUP}
