from fastapi.testclient import TestClient

from clinic.main import app
from clinic.services import scheduler
from clinic.services import users as users_module


def test_scheduler_disabled_by_config():
    assert scheduler.start_scheduler() is None
    scheduler.stop_scheduler()


def test_sweep_job_uses_otp_manager(monkeypatch):
    calls = []

    class StubManager:
        def sweep(self):
            calls.append("sweep")
            return 2

    monkeypatch.setattr(scheduler, "get_otp_manager", lambda: StubManager())

    assert scheduler.sweep_expired_codes() == 2
    assert calls == ["sweep"]


def test_scheduler_registers_interval_job(monkeypatch):
    monkeypatch.setattr(
        scheduler,
        "settings",
        scheduler.settings.__class__(
            otp_sweep_enabled=True, otp_sweep_interval_minutes=15
        ),
    )
    try:
        started = scheduler.start_scheduler()
        job = started.get_job("otp-sweep")
        assert job is not None
        assert job.trigger.interval.total_seconds() == 15 * 60
        assert scheduler.start_scheduler() is started
    finally:
        scheduler.stop_scheduler()


def test_app_lifespan_seeds_admin_and_runs_scheduler(monkeypatch):
    monkeypatch.setattr(
        scheduler,
        "settings",
        scheduler.settings.__class__(otp_sweep_enabled=True),
    )
    monkeypatch.setattr(
        users_module,
        "settings",
        users_module.settings.__class__(
            seed_admin_username="seed", seed_admin_password="seedpass1"
        ),
    )

    with TestClient(app) as client:
        assert scheduler._scheduler is not None
        response = client.post(
            "/api/auth/login", json={"username": "seed", "password": "seedpass1"}
        )
        assert response.status_code == 200

    assert scheduler._scheduler is None
