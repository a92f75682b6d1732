import random

from fastapi.testclient import TestClient
import pytest

from assessment_app.core.assessment_manager import AssessmentManager
from assessment_app.core.services.assessment_session import AssessmentConfig
from assessment_app.server.api_server import create_api_app


@pytest.fixture
def manager(scheduler, bank_dir):
    return AssessmentManager(
        scheduler,
        bank_dir=bank_dir,
        config=AssessmentConfig(duration_seconds=120, question_count=3),
        rng=random.Random(4),
    )


@pytest.fixture
def client(manager):
    return TestClient(create_api_app(manager))


def test_candidate_page_is_served(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "visibilitychange" in response.text


def test_load_bank_returns_idle_state(client):
    response = client.post("/assessment", json={"career_title": "Software Engineer"})

    assert response.status_code == 201
    body = response.json()
    assert body["career_slug"] == "software-engineer"
    assert body["question_total"] == 9
    assert "2 minutes" in body["rules"]
    assert body["state"]["phase"] == "idle"
    assert body["question"] is None


def test_missing_bank_is_unavailable(client):
    response = client.post("/assessment", json={"career_title": "Cybersecurity Analyst"})
    assert response.status_code == 503


def test_start_before_load_conflicts(client):
    assert client.post("/assessment/start").status_code == 409
    assert client.post("/assessment/reset").status_code == 409


def test_full_run_through_the_api(client, manager):
    client.post("/assessment", json={})
    body = client.post("/assessment/start").json()
    assert body["state"]["phase"] == "running"
    assert body["state"]["remaining_display"] == "02:00"
    assert "correct_option_index" not in body["question"]
    assert body["question"]["options_html"][0].startswith("<strong>A.</strong>")

    while body["state"]["phase"] == "running":
        correct = manager.get_current_question().correct_option_index
        body = client.post("/assessment/answer", json={"selected_option_index": correct}).json()
        assert body["accepted"] is True

    assert body["summary"]["percentage_score"] == 100
    assert body["summary"]["termination_reason"] == "completed"

    progress = client.get("/progress").json()
    statuses = {module["module_id"]: module["status"] for module in progress["modules"]}
    assert statuses["career_path"] == "completed"
    assert statuses["skill_test"] == "completed"
    assert progress["overall_completion"] == 33


def test_empty_answer_is_not_accepted(client):
    client.post("/assessment", json={})
    client.post("/assessment/start")
    body = client.post("/assessment/answer", json={"selected_option_index": None}).json()
    assert body["accepted"] is False
    assert body["state"]["current_question_index"] == 0


def test_out_of_range_answer_is_rejected(client):
    client.post("/assessment", json={})
    client.post("/assessment/start")
    response = client.post("/assessment/answer", json={"selected_option_index": 9})
    assert response.status_code == 422


def test_signals_end_session_at_cap(client):
    client.post("/assessment", json={})
    first = client.post("/assessment/signal", json={"kind": "tab_switch"}).json()
    assert first["counted"] is False

    client.post("/assessment/start")
    for kind in ("tab_switch", "clipboard_paste", "fullscreen_exit"):
        body = client.post("/assessment/signal", json={"kind": kind}).json()
        assert body["counted"] is True

    assert body["state"]["phase"] == "finished"
    assert body["state"]["infraction_count"] == 3
    assert body["summary"]["termination_reason"] == "integrity"


def test_unknown_signal_kind_is_rejected(client):
    client.post("/assessment", json={})
    assert client.post("/assessment/signal", json={"kind": "sneeze"}).status_code == 422


def test_presentation_failure_surfaces_warning(client):
    client.post("/assessment", json={})
    client.post("/assessment/start")
    body = client.post(
        "/assessment/presentation",
        json={"acquired": False, "detail": "Fullscreen request denied"},
    ).json()
    assert body["state"]["presentation_warning"] == "Fullscreen request denied"
    assert body["state"]["phase"] == "running"


def test_ticks_show_up_in_polled_state(client, scheduler):
    client.post("/assessment", json={})
    client.post("/assessment/start")
    scheduler.advance(61)
    state = client.get("/assessment/state").json()["state"]
    assert state["remaining_display"] == "00:59"


def test_reset_starts_a_fresh_idle_session(client):
    client.post("/assessment", json={})
    client.post("/assessment/start")
    body = client.post("/assessment/reset").json()
    assert body["state"]["phase"] == "idle"
    assert body["summary"] is None


def test_presentation_failure_arriving_before_start(client):
    client.post("/assessment", json={})
    client.post("/assessment/presentation", json={"acquired": False, "detail": "Fullscreen request denied"})
    state = client.post("/assessment/start").json()["state"]

    assert state["phase"] == "running"
    assert state["presentation_warning"] == "Fullscreen request denied"


def test_state_carries_start_and_finish_times(client):
    client.post("/assessment", json={})
    idle = client.get("/assessment/state").json()["state"]
    assert idle["started_at"] is None
    assert idle["finished_at"] is None

    running = client.post("/assessment/start").json()["state"]
    assert running["started_at"] is not None
    assert running["finished_at"] is None

    for kind in ("tab_switch", "tab_switch", "tab_switch"):
        finished = client.post("/assessment/signal", json={"kind": kind}).json()["state"]
    assert finished["finished_at"] >= finished["started_at"]
