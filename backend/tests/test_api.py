import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from numberpath.core.deps import get_store
from numberpath.main import app
from numberpath.services.progression_store import InMemoryProgressionStore

client = TestClient(app)

STOP_AT_TEN = {
    "operation": "-",
    "number1": 14,
    "number2": 6,
    "correct_answer": 8,
    "number_range": 20,
    "competency_id": "subtraction_with_transition",
}


@pytest.fixture(autouse=True)
def store():
    fresh = InMemoryProgressionStore()
    app.dependency_overrides[get_store] = lambda: fresh
    yield fresh
    app.dependency_overrides.clear()


def test_health():
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["health"] == "/health"


def test_list_competencies():
    response = client.get("/api/practice/competencies")
    assert response.status_code == 200
    ids = {c["id"] for c in response.json()}
    assert {"addition_ZR10_no_transition", "placeholder_middle", "complement_to_100"} <= ids


def test_new_learner_session():
    response = client.post("/api/practice/ana/session", json={})
    assert response.status_code == 200
    body = response.json()
    assert body["level"] == 1.0
    assert body["number_range"] == 10
    assert len(body["tasks"]) == 10
    for t in body["tasks"]:
        assert t["displayed_result"] >= 0


def test_session_with_explicit_level_and_count():
    response = client.post("/api/practice/ana/session", json={"count": 5, "current_level": 30})
    body = response.json()
    assert body["number_range"] == 50
    assert len(body["tasks"]) == 5


def test_session_avoids_previous_task():
    previous = {"number1": 3, "number2": 4, "operation": "+", "placeholder_position": "end"}
    response = client.post("/api/practice/ana/session", json={"count": 3, "previous_task": previous})
    first = response.json()["tasks"][0]
    assert (first["number1"], first["number2"], first["operation"], first["placeholder_position"]) != (3, 4, "+", "end")


def test_session_rejects_zero_count():
    response = client.post("/api/practice/ana/session", json={"count": 0})
    assert response.status_code == 422


def test_correct_attempt(store):
    response = client.post("/api/practice/ben/attempts", json={"task": STOP_AT_TEN, "student_answer": 8})
    assert response.status_code == 200
    body = response.json()
    assert body["is_correct"] is True
    assert body["error_analysis"] is None
    assert body["task_string"] == "14-6"
    assert "subtraction_with_transition" in body["competencies"]
    assert body["explanation"]["final_answer"] == "8"
    assert body["representation"]["action"] in ("reduce", "increase", "maintain")
    assert store.get("ben").total_tasks_solved == 1


def test_wrong_attempt_is_classified(store):
    response = client.post("/api/practice/ben/attempts", json={"task": STOP_AT_TEN, "student_answer": 12})
    body = response.json()
    assert body["is_correct"] is False
    assert body["error_analysis"]["error_type"] == "decade_boundary_confusion"
    progress = store.get("ben").competency_progress["subtraction_with_transition"]
    assert progress.recent_errors == ["14-6"]


def test_attempt_repairs_client_answer():
    task = dict(STOP_AT_TEN, correct_answer=9)
    response = client.post("/api/practice/ben/attempts", json={"task": task, "student_answer": 8})
    body = response.json()
    assert body["expected"] == 8
    assert body["is_correct"] is True


def test_attempt_with_placeholder():
    task = {"operation": "+", "number1": 7, "number2": 5, "correct_answer": 5,
            "placeholder_position": "middle", "competency_id": "placeholder_middle"}
    body = client.post("/api/practice/ben/attempts", json={"task": task, "student_answer": 5}).json()
    assert body["is_correct"] is True
    assert body["task_string"] == "7+_=12"


def test_attempt_with_single_channel_records_solo_test(store):
    client.post("/api/practice/ben/attempts", json={
        "task": STOP_AT_TEN, "student_answer": 8, "active_channels": ["number_line", "symbolic"],
    })
    assert store.get("ben").representation.solo["number_line"].attempted == 1


def test_negative_subtraction_rejected():
    task = dict(STOP_AT_TEN, number1=3, number2=5, correct_answer=0)
    response = client.post("/api/practice/ben/attempts", json={"task": task, "student_answer": 2})
    assert response.status_code == 400


def test_progress_lifecycle():
    assert client.get("/api/practice/cleo/progress").status_code == 404

    client.post("/api/practice/cleo/attempts", json={"task": STOP_AT_TEN, "student_answer": 12})
    response = client.get("/api/practice/cleo/progress")
    assert response.status_code == 200
    body = response.json()
    assert body["total_tasks_solved"] == 1
    assert body["total_correct"] == 0
    assert body["summary"]["practiced"] >= 1
    assert len(body["representation"]) == 4

    assert client.delete("/api/practice/cleo").json() == {"ok": True}
    assert client.get("/api/practice/cleo/progress").status_code == 404


def test_classify():
    response = client.post("/api/practice/classify", json={
        "operation": "+", "number1": 6, "number2": 6, "correct_answer": 12, "student_answer": 11,
    })
    assert response.json()["error_type"] == "doubling_error"


def test_classify_correct_answer_is_null():
    response = client.post("/api/practice/classify", json={
        "operation": "+", "number1": 6, "number2": 6, "correct_answer": 12, "student_answer": 12,
    })
    assert response.status_code == 200
    assert response.json() is None


def test_classify_rejects_negative_subtraction():
    response = client.post("/api/practice/classify", json={
        "operation": "-", "number1": 3, "number2": 5, "correct_answer": 0, "student_answer": 1,
    })
    assert response.status_code == 400


def test_attempt_emits_telemetry(caplog):
    with caplog.at_level(logging.INFO, logger="numberpath.telemetry"):
        client.post("/api/practice/dev/attempts", json={"task": STOP_AT_TEN, "student_answer": 12})
    assert '"event":"attempt"' in caplog.text
    assert '"error_type":"decade_boundary_confusion"' in caplog.text
    assert '"event":"api_call"' in caplog.text


def test_session_uses_builder():
    with patch("numberpath.api.practice.get_session_builder") as mock_builder:
        mock_builder.return_value.generate_session_batch.return_value = []
        response = client.post("/api/practice/eve/session", json={"count": 4, "current_level": 12})
    assert response.status_code == 200
    _, kwargs = mock_builder.return_value.generate_session_batch.call_args
    assert kwargs["count"] == 4
    assert kwargs["current_level"] == 12.0


def test_session_telemetry_carries_level(caplog):
    with caplog.at_level(logging.INFO, logger="numberpath.telemetry"):
        client.post("/api/practice/fay/session", json={"count": 3})
    assert '"event":"session"' in caplog.text
    assert '"level":1.0' in caplog.text
    assert '"number_range":10' in caplog.text


def test_streak_raises_stored_level(store, caplog):
    easy = {"operation": "+", "number1": 3, "number2": 4, "correct_answer": 7, "number_range": 10}
    with caplog.at_level(logging.INFO, logger="numberpath.telemetry"):
        for _ in range(5):
            client.post("/api/practice/gus/attempts", json={"task": easy, "student_answer": 7})
    assert store.get("gus").current_level == 2
    assert '"event":"level_change"' in caplog.text
    body = client.post("/api/practice/gus/session", json={"count": 4}).json()
    assert body["level"] == 2.0
    assert body["number_range"] == 10
