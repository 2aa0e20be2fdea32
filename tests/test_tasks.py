"""
Scheduled Celery tasks, run eagerly with the db job stubbed out.
"""
from menuboard.core.celery_app import celery_app
from menuboard.core.errors import ExternalFetchError
from menuboard.schemas.settings import ExchangeRates
from menuboard.tasks import scheduled_tasks


def test_beat_schedule_has_nightly_snapshot():
    schedule = celery_app.conf.beat_schedule
    assert schedule["daily-menu-snapshot"]["task"] == "create_daily_snapshot"
    assert "sync-google-sheets" not in schedule


def test_snapshot_task_returns_snapshot_id(monkeypatch):
    monkeypatch.setattr(scheduled_tasks, "run_job", lambda job: "snapshot-1")
    assert scheduled_tasks.create_daily_snapshot() == "snapshot-1"


def test_exchange_rate_task_swallows_fetch_errors(monkeypatch):
    def failing(job):
        raise ExternalFetchError("Timed out fetching exchange rates")

    monkeypatch.setattr(scheduled_tasks, "run_job", failing)
    assert scheduled_tasks.refresh_exchange_rates() is None


def test_exchange_rate_task_returns_rates(monkeypatch):
    rates = ExchangeRates(USD=1, CZK=23, EUR=0.9, CNY=7.1)
    monkeypatch.setattr(scheduled_tasks, "run_job", lambda job: rates)
    assert scheduled_tasks.refresh_exchange_rates() == rates.model_dump()


def test_sheets_task_skips_without_spreadsheet(monkeypatch):
    def unexpected(job):
        raise AssertionError("sync should not run")

    monkeypatch.setattr(scheduled_tasks, "run_job", unexpected)
    assert scheduled_tasks.sync_google_sheets() is None
