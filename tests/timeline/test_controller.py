import pytest
from flask import Flask

from src.worktimeline.worktimeline.container import build_container
from src.worktimeline.worktimeline.history.model import HistoryEntry
from src.worktimeline.worktimeline.main import create_app
from src.worktimeline.worktimeline.timeline.controller import register


@pytest.fixture
def client():
    app = Flask(__name__)
    app.config["TESTING"] = True
    register(app, build_container())
    return app.test_client()


def timeline(**overrides) -> dict:
    data = {
        "card_name": "Pump overhaul",
        "start": "2026-03-02T11:45",
        "lunch": {"start": "12:00", "duration": 45},
        "workers": {"count": 1},
        "operations": [
            {"ordinal": 1, "name": "Inspect", "duration": 30},
            {"ordinal": 2, "name": "Repair", "duration": 45},
        ],
    }
    data.update(overrides)
    return data


def new_session(client) -> str:
    resp = client.post("/api/sessions", json={"name": "Shift A"})
    assert resp.status_code == 201
    return resp.get_json()["session"]["id"]


def test_generate_then_chain_then_read_history(client):
    session_id = new_session(client)

    first = client.post(f"/api/sessions/{session_id}/timeline", json=timeline())
    second = client.post(
        f"/api/sessions/{session_id}/timeline",
        json=timeline(chain=True, time_mode="individual", operations=[{"name": "Test", "duration": 30}]),
    )

    assert first.status_code == 201
    rows = first.get_json()["entry"]["rows"]
    assert [(r["start"], r["end"], r["crossed_lunch"]) for r in rows] == [
        ("2026-03-02T11:45:00", "2026-03-02T13:00:00", True),
        ("2026-03-02T13:00:00", "2026-03-02T13:45:00", False),
    ]
    chained = second.get_json()["entry"]
    assert chained["time_mode"] == "total"
    assert chained["rows"][0]["start"] == "2026-03-02T13:45:00"

    history = client.get(f"/api/sessions/{session_id}/history").get_json()
    assert len(history["entries"]) == 2


def test_export_returns_workbook(client):
    session_id = new_session(client)
    client.post(f"/api/sessions/{session_id}/timeline", json=timeline())

    resp = client.get(f"/api/sessions/{session_id}/export")

    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert resp.data[:2] == b"PK"


def test_export_of_empty_history_is_a_client_error(client):
    session_id = new_session(client)

    resp = client.get(f"/api/sessions/{session_id}/export")

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_all_deleted_operations_are_unprocessable(client):
    session_id = new_session(client)

    resp = client.post(
        f"/api/sessions/{session_id}/timeline",
        json=timeline(operations=[{"name": "x", "duration": 5, "deleted": True}]),
    )

    assert resp.status_code == 422


def test_clear_rename_and_delete(client):
    session_id = new_session(client)
    client.post(f"/api/sessions/{session_id}/timeline", json=timeline())

    assert client.delete(f"/api/sessions/{session_id}/history").get_json()["removed"] == 1
    assert client.patch(f"/api/sessions/{session_id}", json={"name": "Night"}).status_code == 200
    sessions = client.get("/api/sessions").get_json()["sessions"]
    assert [s["name"] for s in sessions] == ["Night"]
    assert client.delete(f"/api/sessions/{session_id}").status_code == 200
    assert client.get(f"/api/sessions/{session_id}/history").status_code == 404


def test_create_app_uses_testing_settings(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    app = create_app()

    assert app.config["TESTING"] is True
    assert "generate_timeline" in app.view_functions


def test_export_of_incomplete_entry_is_a_conflict_not_a_server_error():
    container = build_container()
    app = Flask(__name__)
    register(app, container)
    session = container.history_repo.create_session("Shift A")
    container.history_repo.append_entry(
        session_id=session.session_id, entry=HistoryEntry(title="broken", rows=(), lunch=None)
    )

    resp = app.test_client().get(f"/api/sessions/{session.session_id}/export")

    assert resp.status_code == 409
    assert resp.get_json()["success"] is False
