import logging

from bridge_lfu.services.notification_email_job import empty_stats
from scripts import run_notification_cycle


def _scan_stats(created):
    stats = {"assets": 1, "created": created, "duplicates": 0, "errors": 0}
    return {"licenses": dict(stats), "equipment": dict(stats, created=0)}


def test_cycle_logs_counts(monkeypatch, caplog):
    monkeypatch.setattr(run_notification_cycle, "setup_logging", lambda: None)
    monkeypatch.setattr(
        run_notification_cycle,
        "run_cycle",
        lambda: (_scan_stats(1), dict(empty_stats(), processed=1, sent=1)),
    )

    with caplog.at_level(logging.INFO, logger="bridge_lfu.scripts.run_notification_cycle"):
        assert run_notification_cycle.main() == 0

    assert "Alerts created: 1. Emails processed: 1, sent: 1" in caplog.text


def test_cycle_failure_is_logged_with_traceback(monkeypatch, caplog):
    monkeypatch.setattr(run_notification_cycle, "setup_logging", lambda: None)

    def broken_cycle():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(run_notification_cycle, "run_cycle", broken_cycle)

    with caplog.at_level(logging.ERROR, logger="bridge_lfu.scripts.run_notification_cycle"):
        assert run_notification_cycle.main() == 1

    record = caplog.records[-1]
    assert record.getMessage() == "Notification cycle failed"
    assert record.exc_info[0] is RuntimeError
