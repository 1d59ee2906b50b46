"""Email dispatch for pending notifications.

The batch job picks up to ``email_batch_size`` notifications still flagged
``email_sent = false``, oldest first, and tries to deliver each one. A
notification whose owner disabled email is marked sent without contacting the
sender; a failed delivery stays pending and is retried on the next run.

Only one batch runs at a time per job instance: a second call made while a
batch is in progress returns zero statistics immediately.
"""
import logging
import threading
import time
from collections.abc import Callable
from functools import lru_cache

from sqlalchemy.orm import Session

from bridge_lfu.config import get_settings
from bridge_lfu.models.notification import Notification
from bridge_lfu.models.user import Profile
from bridge_lfu.services.alert_settings import get_alert_settings
from bridge_lfu.services.email_sender import EmailSender, SmtpEmailSender
from bridge_lfu.services.notification_store import (
    create_notification,
    get_unsent_notifications,
    mark_email_sent,
)

logger = logging.getLogger(__name__)

SENT = "sent"
FAILED = "failed"
SKIPPED = "skipped"


def empty_stats() -> dict:
    return {"processed": 0, "sent": 0, "failed": 0, "skipped": 0}


class NotificationEmailJob:
    """Delivers pending notifications through an injected email sender."""

    def __init__(
        self,
        sender: EmailSender | None = None,
        batch_size: int | None = None,
        send_delay_ms: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = get_settings()
        self.sender = sender or SmtpEmailSender(settings)
        self.batch_size = settings.email_batch_size if batch_size is None else batch_size
        self.send_delay_ms = settings.email_send_delay_ms if send_delay_ms is None else send_delay_ms
        self._sleep = sleep
        self._run_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def process_unsent(self, db: Session) -> dict:
        """Run one batch. Returns {processed, sent, failed, skipped}."""
        stats = empty_stats()
        if not self._run_lock.acquire(blocking=False):
            logger.info("Notification email job already running, skipping this run")
            return stats

        try:
            try:
                notifications = get_unsent_notifications(db, self.batch_size)
            except Exception:
                db.rollback()
                logger.exception("Failed to load pending notifications")
                return stats

            if not notifications:
                logger.info("No pending notification emails")
                return stats

            logger.info("Processing %d pending notification emails", len(notifications))
            for index, notification in enumerate(notifications):
                stats["processed"] += 1
                outcome = self._deliver_safely(db, notification)
                stats[outcome] += 1
                if outcome != SKIPPED and index < len(notifications) - 1:
                    self._pause()
        finally:
            self._run_lock.release()

        logger.info("Notification email job finished: %s", stats)
        return stats

    def deliver(self, db: Session, notification: Notification) -> str:
        """Resolve settings and recipient, then send or skip one notification.

        Returns one of "sent", "failed" or "skipped". Sender exceptions count as
        a failure and leave the notification pending.
        """
        settings = get_alert_settings(db, notification.user_id)
        if not settings.email_enabled:
            mark_email_sent(db, notification)
            logger.debug("Email disabled for user %s, notification %s marked done", notification.user_id, notification.id)
            return SKIPPED

        profile = db.get(Profile, notification.user_id)
        if profile is None or not profile.email:
            logger.warning("No email address for user %s, notification %s left pending", notification.user_id, notification.id)
            return FAILED

        try:
            delivered = self.sender.send(notification, profile.email, profile.display_name)
        except Exception:
            logger.exception("Email sender raised for notification %s", notification.id)
            delivered = False

        if not delivered:
            logger.info("Email not sent for notification %s", notification.id)
            return FAILED

        mark_email_sent(db, notification)
        logger.info("Email sent for notification %s", notification.id)
        return SENT

    def _deliver_safely(self, db: Session, notification: Notification) -> str:
        notification_id = notification.id
        try:
            return self.deliver(db, notification)
        except Exception:
            db.rollback()
            logger.exception("Failed to process notification %s", notification_id)
            return FAILED

    def _pause(self) -> None:
        if self.send_delay_ms:
            self._sleep(self.send_delay_ms / 1000)

    def create_and_send_notification(
        self,
        db: Session,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        related_id: str | None = None,
        related_type: str | None = None,
    ) -> Notification | None:
        """Create a notification and attempt its email right away.

        Uses the same delivery path as the batch job. Returns None if the
        notification could not be created.
        """
        try:
            notification = create_notification(
                db,
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                related_id=related_id,
                related_type=related_type,
            )
        except Exception:
            db.rollback()
            logger.exception("Failed to create notification for user %s", user_id)
            return None

        outcome = self._deliver_safely(db, notification)
        logger.info("Notification %s created, email %s", notification.id, outcome)
        db.refresh(notification)
        return notification


@lru_cache
def get_notification_email_job() -> NotificationEmailJob:
    """Process-wide job instance used by the API and the cron script."""
    return NotificationEmailJob()


def trigger_notification_email_job(db: Session) -> dict:
    return get_notification_email_job().process_unsent(db)
