"""Run one alert scan and email batch. Schedule this with cron.

    python -m scripts.run_notification_cycle
"""
import logging

from bridge_lfu import models  # noqa: F401
from bridge_lfu.database import Base, engine, get_db_context
from bridge_lfu.logging import setup_logging
from bridge_lfu.services.alert_scanner import trigger_all_alerts
from bridge_lfu.services.notification_email_job import trigger_notification_email_job

logger = logging.getLogger("bridge_lfu.scripts.run_notification_cycle")


def run_cycle() -> tuple[dict, dict]:
    with get_db_context() as db:
        alert_stats = trigger_all_alerts(db)
        email_stats = trigger_notification_email_job(db)
    return alert_stats, email_stats


def main() -> int:
    setup_logging()

    try:
        Base.metadata.create_all(engine)
        alert_stats, email_stats = run_cycle()
    except Exception:
        logger.exception("Notification cycle failed")
        return 1

    created = alert_stats["licenses"]["created"] + alert_stats["equipment"]["created"]
    logger.info(
        "Alerts created: %d. Emails processed: %d, sent: %d, failed: %d, skipped: %d.",
        created,
        email_stats["processed"],
        email_stats["sent"],
        email_stats["failed"],
        email_stats["skipped"],
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
