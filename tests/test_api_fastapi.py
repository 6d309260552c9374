from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

PROFILE = {
    "name": "Sam",
    "days_per_week": 4,
    "long_run_day": "Saturday",
    "start_date": "2025-01-06",
    "race_date": "2025-04-06",
}


def _build_client(tmp_path: Path, monkeypatch, today: date = date(2025, 1, 12), app_env: str = "test") -> TestClient:
    from api.deps import get_today
    from api.main import create_app
    from halftrack.config import get_settings
    from halftrack.db import reset_engine

    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'api_test.db'}")
    monkeypatch.setenv("APP_ENV", app_env)
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173")
    get_settings.cache_clear()
    reset_engine()

    app = create_app()
    app.dependency_overrides[get_today] = lambda: today
    return TestClient(app)


def _create(client: TestClient, key: str = "sam", profile: dict | None = None) -> dict:
    resp = client.post(f"/api/v1/plans/{key}", json=profile or PROFILE)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _id_on(plan: dict, day: str) -> str:
    return next(w["id"] for w in plan["workouts"] if w["date"] == day)


def test_health_echoes_or_generates_request_id_header(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-test-123"})
        assert resp.status_code == 200, resp.text
        assert resp.headers["X-Request-ID"] == "req-test-123"
        assert resp.json()["status"] == "ok"

        generated = client.get("/api/v1/health")
        assert generated.headers.get("X-Request-ID")


def test_paces_endpoint(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        default = client.get("/api/v1/paces").json()
        assert default["easy"] == 630
        assert default["display"]["tempo"] == "9:18/mi"
        assert default["half_estimate"] is None

        with_pb = client.get("/api/v1/paces", params={"five_k": "20:00"}).json()
        assert with_pb["easy"] == pytest.approx(1200 / 3.1 + 90)
        assert with_pb["half_estimate_display"].startswith("1:32")


def test_create_and_read_plan(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        created = _create(client)
        assert created["total_weeks"] == 14
        assert len(created["workouts"]) == 53
        assert created["profile"]["long_run_day"] == "Saturday"

        fetched = client.get("/api/v1/plans/sam").json()
        assert [w["id"] for w in fetched["workouts"]] == [w["id"] for w in created["workouts"]]

        week = client.get("/api/v1/plans/sam/weeks/10").json()
        assert week["classification"] == "tempo"
        assert week["planned_miles"] == 23.0
        tempo = next(w for w in week["workouts"] if w["type"] == "tempo")
        assert tempo["segments"] == {"warmup": 1.0, "tempo": 2.5, "cooldown": 0.5}

        assert client.get("/api/v1/plans/sam/weeks/15").status_code == 404
        assert client.get("/api/v1/plans/nobody").status_code == 404


def test_invalid_profile_rejected(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        resp = client.post("/api/v1/plans/sam", json={**PROFILE, "days_per_week": 2})
        assert resp.status_code == 422


def test_complete_skip_and_undo_flow(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client)
        long_id = _id_on(plan, "2025-01-11")

        resp = client.post(f"/api/v1/plans/sam/workouts/{long_id}/complete", json={"actual_distance": 6, "actual_pace": "10:00"})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["accepted"] is True
        assert body["workout"]["status"] == "completed"
        assert body["workout"]["actual_pace"] == 600

        again = client.post(f"/api/v1/plans/sam/workouts/{long_id}/skip")
        assert again.status_code == 409

        undone = client.post(f"/api/v1/plans/sam/workouts/{long_id}/undo-complete").json()
        assert undone["workout"]["status"] == "scheduled"
        assert undone["workout"]["actual_distance"] is None

        easy_id = _id_on(plan, "2025-01-07")
        assert client.post(f"/api/v1/plans/sam/workouts/{easy_id}/skip").status_code == 200
        assert client.post(f"/api/v1/plans/sam/workouts/{easy_id}/complete", json={}).status_code == 409
        assert client.post(f"/api/v1/plans/sam/workouts/{easy_id}/undo-skip").json()["workout"]["status"] == "scheduled"


def test_future_and_stale_completion(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch, today=date(2025, 1, 20)) as client:
        plan = _create(client)
        future = client.post(f"/api/v1/plans/sam/workouts/{_id_on(plan, '2025-01-21')}/complete", json={})
        assert future.status_code == 409
        assert future.json()["detail"]["reason"] == "Can't log a future run"

        stale_id = _id_on(plan, "2025-01-05")
        stale = client.post(f"/api/v1/plans/sam/workouts/{stale_id}/complete", json={})
        assert stale.status_code == 409
        assert stale.json()["detail"]["needs_confirmation"] is True

        confirmed = client.post(f"/api/v1/plans/sam/workouts/{stale_id}/complete", json={"confirmed": True})
        assert confirmed.status_code == 200


def test_completions_recalibrate_stored_plan(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client)
        for day in ("2025-01-05", "2025-01-07", "2025-01-09"):
            resp = client.post(f"/api/v1/plans/sam/workouts/{_id_on(plan, day)}/complete", json={"actual_pace": "11:30"})
            assert resp.status_code == 200, resp.text

        stored = client.get("/api/v1/plans/sam").json()
        long_run = next(w for w in stored["workouts"] if w["date"] == "2025-01-11")
        assert long_run["estimated_pace"] == 660

        trend = client.get("/api/v1/plans/sam/pace-trend").json()
        assert trend == [{"week": 1, "ref_pace": 570, "display": "9:30/mi"}]


def test_edit_add_and_delete_workouts(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client)
        run_id = _id_on(plan, "2025-01-14")

        edited = client.patch(
            f"/api/v1/plans/sam/workouts/{run_id}",
            json={"type": "tempo", "notes": "hills", "date": "2025-01-15"},
        )
        assert edited.status_code == 200, edited.text
        body = edited.json()
        assert (body["type"], body["label"], body["notes"], body["date"]) == ("tempo", "Tempo Run", "hills", "2025-01-15")

        actuals = client.patch(f"/api/v1/plans/sam/workouts/{run_id}", json={"actual_distance": 5})
        assert actuals.status_code == 409

        added = client.post("/api/v1/plans/sam/workouts", json={"date": "2025-01-17", "type": "recovery", "distance": 2.5})
        assert added.status_code == 201, added.text
        assert added.json()["user_added"] is True
        assert added.json()["week"] == 2

        assert client.delete(f"/api/v1/plans/sam/workouts/{run_id}").status_code == 204
        assert client.delete(f"/api/v1/plans/sam/workouts/{run_id}").status_code == 404
        remaining = client.get("/api/v1/plans/sam").json()["workouts"]
        assert len(remaining) == 53


def test_summary_and_projection(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client, profile={**PROFILE, "five_k_time": "20:00"})
        client.post(f"/api/v1/plans/sam/workouts/{_id_on(plan, '2025-01-11')}/complete", json={})
        client.post(f"/api/v1/plans/sam/workouts/{_id_on(plan, '2025-01-12')}/complete", json={})

        summary = client.get("/api/v1/plans/sam/summary").json()
        assert summary["completed"] == 2
        assert summary["streak"] == 2
        assert summary["current_week"] == 2
        assert summary["total_weeks"] == 14
        assert summary["countdown"]["days"] == 84
        assert summary["weeks"][0] == {"week": 1, "planned": 14.0, "completed": 5.0, "skipped": 0.0}

        projection = client.get("/api/v1/plans/sam/projection").json()
        assert projection["from_training"] is None
        assert projection["from_training_display"] == "--"
        assert projection["from_personal_bests"] == pytest.approx(summary["half_estimate"])


def test_delete_plan(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        _create(client)
        assert client.delete("/api/v1/plans/sam").status_code == 204
        assert client.delete("/api/v1/plans/sam").status_code == 404


def test_partial_actuals_edit_keeps_other_actuals(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client)
        long_id = _id_on(plan, "2025-01-11")
        client.post(f"/api/v1/plans/sam/workouts/{long_id}/complete", json={"actual_distance": 6, "actual_pace": "10:00"})

        resp = client.patch(f"/api/v1/plans/sam/workouts/{long_id}", json={"actual_distance": 7})
        assert resp.status_code == 200, resp.text
        assert (resp.json()["actual_distance"], resp.json()["actual_pace"]) == (7.0, 600)

        resp = client.patch(f"/api/v1/plans/sam/workouts/{long_id}", json={"actual_pace": "9:50"})
        assert (resp.json()["actual_distance"], resp.json()["actual_pace"]) == (7.0, 590)


def test_completed_run_cannot_be_moved_into_the_future(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client)
        long_id = _id_on(plan, "2025-01-11")
        client.post(f"/api/v1/plans/sam/workouts/{long_id}/complete", json={})

        moved = client.patch(f"/api/v1/plans/sam/workouts/{long_id}", json={"date": "2025-01-14"})
        assert moved.status_code == 409
        assert moved.json()["detail"]["reason"] == "Can't move a completed run into the future"
        stored = client.get("/api/v1/plans/sam").json()
        assert any(w["id"] == long_id and w["date"] == "2025-01-11" for w in stored["workouts"])


def test_run_added_after_race_week_keeps_plan_length(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        _create(client)
        added = client.post("/api/v1/plans/sam/workouts", json={"date": "2025-04-15", "type": "recovery", "distance": 3})
        assert added.json()["week"] == 15

        assert client.get("/api/v1/plans/sam").json()["total_weeks"] == 14
        race_week = client.get("/api/v1/plans/sam/weeks/14").json()
        assert race_week["is_race"] is True
        assert race_week["classification"] == "race"


def test_docs_disabled_in_production(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        assert client.get("/docs").status_code == 200
    with _build_client(tmp_path, monkeypatch, app_env="production") as client:
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404
        assert client.get("/api/v1/health").status_code == 200


def test_calendar_preview(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        preview = client.get("/api/v1/calendar", params={"race_date": "2025-04-06"}).json()
        assert preview == {
            "start_date": "2025-01-12",
            "race_date": "2025-04-06",
            "total_weeks": 13,
            "hint": "12 training weeks + race week",
        }

        short = client.get("/api/v1/calendar", params={"start_date": "2025-03-01", "race_date": "2025-03-20"}).json()
        assert short["total_weeks"] == 5
        assert short["hint"].startswith("Only 3 training weeks")

        assert client.get("/api/v1/calendar").status_code == 400


def test_punishment_plan_via_api(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        plan = _create(client, profile={**PROFILE, "five_k_time": "20:00", "mode": "punishment"})
        assert plan["profile"]["mode"] == "punishment"
        long_run = next(w for w in plan["workouts"] if w["date"] == "2025-01-11")
        assert long_run["estimated_pace"] == 410


def test_injury_log_endpoints(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        _create(client)
        assert client.get("/api/v1/plans/sam/injury-warnings").json()["workouts"] == []

        created = client.post("/api/v1/plans/sam/injuries", json={"body_part": "Knee", "severity": "Mild"})
        assert created.status_code == 201, created.text
        injury = created.json()
        assert injury["start_date"] == "2025-01-12"

        dup = client.post("/api/v1/plans/sam/injuries", json={"body_part": "knee", "severity": "Severe"})
        assert dup.status_code == 409

        warnings = client.get("/api/v1/plans/sam/injury-warnings").json()
        assert warnings["worst_severity"] == "Mild"
        assert [w["date"] for w in warnings["workouts"]] == ["2025-01-18", "2025-01-21", "2025-01-25"]

        edited = client.patch(f"/api/v1/plans/sam/injuries/{injury['id']}", json={"severity": "Severe"})
        assert edited.json()["severity"] == "Severe"

        resolved = client.post(f"/api/v1/plans/sam/injuries/{injury['id']}/resolve").json()
        assert (resolved["resolved"], resolved["resolved_date"]) == (True, "2025-01-12")
        assert client.get("/api/v1/plans/sam/injury-warnings").json()["active"] == []
        assert len(client.get("/api/v1/plans/sam/injuries").json()) == 1

        assert client.delete(f"/api/v1/plans/sam/injuries/{injury['id']}").status_code == 204
        assert client.delete(f"/api/v1/plans/sam/injuries/{injury['id']}").status_code == 404


def test_cross_training_endpoints(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        _create(client)
        first = client.post("/api/v1/plans/sam/cross-training", json={"date": "2025-01-08", "activity": "Cycling", "duration": 45})
        assert first.status_code == 201, first.text
        client.post("/api/v1/plans/sam/cross-training", json={"date": "2025-01-10", "activity": "Swimming", "duration": 30})

        listed = client.get("/api/v1/plans/sam/cross-training", params={"start": "2025-01-09"}).json()
        assert [c["activity"] for c in listed] == ["Swimming"]

        session_id = first.json()["id"]
        assert client.patch(f"/api/v1/plans/sam/cross-training/{session_id}", json={"duration": 60}).json()["duration"] == 60

        stats = client.get("/api/v1/plans/sam/cross-training/stats").json()
        assert (stats["sessions"], stats["minutes"]) == (2, 90)
        assert [t["activity"] for t in stats["by_activity"]] == ["Cycling", "Swimming"]
        assert client.get("/api/v1/plans/sam/cross-training/activities").json()[:2] == ["Cycling", "Swimming"]

        assert client.delete(f"/api/v1/plans/sam/cross-training/{session_id}").status_code == 204
        assert client.patch(f"/api/v1/plans/sam/cross-training/{session_id}", json={"duration": 5}).status_code == 404
