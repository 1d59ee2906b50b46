"""Scheduled scan of expiring licenses and obsolescing equipment.

Each run looks at assets whose relevant date lies ahead, works out how many
calendar days remain, and creates a notification for every recipient whose
configured thresholds contain exactly that number. A notification already
created for the same recipient, asset and milestone within the dedup window
suppresses a new one, so repeated runs on the same day are harmless.

Failures are contained per asset and per recipient: they are logged, counted
and the scan moves on.
"""
import logging
from datetime import date, datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from bridge_lfu.config import get_settings
from bridge_lfu.models.asset import Equipment, License, LicenseStatus
from bridge_lfu.models.notification import AlertMilestone, NotificationType
from bridge_lfu.models.user import STAFF_ROLES, Profile, Role
from bridge_lfu.services.alert_dates import dedup_cutoff, is_threshold_day, utcnow
from bridge_lfu.services.alert_messages import compose_alert
from bridge_lfu.services.alert_settings import get_alert_settings
from bridge_lfu.services.notification_store import create_notification, find_recent_notification

logger = logging.getLogger(__name__)

# (milestone, date attribute) pairs evaluated independently for each unit
EQUIPMENT_MILESTONES = (
    (AlertMilestone.OBSOLESCENCE, "estimated_obsolescence_date"),
    (AlertMilestone.END_OF_SALE, "end_of_sale"),
)


def _new_stats() -> dict:
    return {"assets": 0, "created": 0, "duplicates": 0, "errors": 0}


def get_alert_recipients(db: Session, client_id: str | None) -> list[Profile]:
    """Everyone who should hear about an asset of the given client.

    All admins and technicians, plus the client users attached to that client.
    """
    staff = (
        db.query(Profile)
        .filter(Profile.role.in_([role.value for role in STAFF_ROLES]))
        .order_by(Profile.created_at.asc())
        .all()
    )
    client_users = []
    if client_id is not None:
        client_users = (
            db.query(Profile)
            .filter(Profile.role == Role.CLIENT.value, Profile.client_id == client_id)
            .order_by(Profile.created_at.asc())
            .all()
        )
    return staff + client_users


def _alert_recipient(
    db: Session,
    recipient: Profile,
    notification_type: NotificationType,
    milestone: AlertMilestone,
    related_type: str,
    asset,
    target_date: date,
    alert_days_field: str,
    now: datetime,
    stats: dict,
) -> None:
    settings = get_alert_settings(db, recipient.id)
    remaining = is_threshold_day(target_date, getattr(settings, alert_days_field), now.date())
    if remaining is None:
        return

    since = dedup_cutoff(now, get_settings().alert_dedup_window_hours)
    existing = find_recent_notification(
        db,
        user_id=recipient.id,
        notification_type=notification_type.value,
        related_id=asset.id,
        since=since,
        milestone=milestone.value,
    )
    if existing:
        stats["duplicates"] += 1
        return

    client_name = asset.client.name if asset.client else None
    title, message = compose_alert(
        milestone, recipient.role, asset.name, client_name, remaining, target_date
    )
    # Disabled email is a delivery preference: the alert is still shown in-app.
    create_notification(
        db,
        user_id=recipient.id,
        notification_type=notification_type.value,
        title=title,
        message=message,
        related_id=asset.id,
        related_type=related_type,
        milestone=milestone.value,
        email_sent=not settings.email_enabled,
        created_at=now,
    )
    stats["created"] += 1


def _alert_asset(
    db: Session,
    asset,
    milestones,
    notification_type: NotificationType,
    related_type: str,
    alert_days_field: str,
    now: datetime,
    stats: dict,
) -> None:
    # Past dates are left in; is_threshold_day never matches them
    due = [
        (milestone, getattr(asset, date_field))
        for milestone, date_field in milestones
        if getattr(asset, date_field) is not None
    ]
    if not due:
        return

    recipients = get_alert_recipients(db, asset.client_id)
    for recipient in recipients:
        for milestone, target_date in due:
            try:
                _alert_recipient(
                    db, recipient, notification_type, milestone, related_type,
                    asset, target_date, alert_days_field, now, stats,
                )
            except Exception:
                db.rollback()
                stats["errors"] += 1
                logger.exception(
                    "Failed to process %s alert for %s %s and user %s",
                    milestone.value, related_type, asset.id, recipient.id,
                )


def _scan(db: Session, candidates, milestones, notification_type, related_type, alert_days_field, now, stats) -> dict:
    for asset in candidates:
        stats["assets"] += 1
        try:
            _alert_asset(db, asset, milestones, notification_type, related_type, alert_days_field, now, stats)
        except Exception:
            db.rollback()
            stats["errors"] += 1
            logger.exception("Failed to scan %s %s", related_type, asset.id)
    return stats


def scan_license_expiry(db: Session, now: datetime | None = None) -> dict:
    """Create license_expiry notifications for licenses hitting a threshold today."""
    now = now or utcnow()
    stats = _new_stats()
    today = now.date()

    try:
        licenses = (
            db.query(License)
            .filter(
                License.expiry_date >= today,
                or_(License.status.is_(None), License.status != LicenseStatus.CANCELLED.value),
            )
            .order_by(License.expiry_date.asc())
            .all()
        )
    except Exception:
        db.rollback()
        stats["errors"] += 1
        logger.exception("Failed to fetch licenses for expiry scan")
        return stats

    return _scan(
        db, licenses, ((AlertMilestone.EXPIRY, "expiry_date"),),
        NotificationType.LICENSE_EXPIRY, "license", "license_alert_days", now, stats,
    )


def scan_equipment_obsolescence(db: Session, now: datetime | None = None) -> dict:
    """Create equipment_obsolescence notifications for obsolescence and end-of-sale dates."""
    now = now or utcnow()
    stats = _new_stats()
    today = now.date()

    try:
        equipment = (
            db.query(Equipment)
            .filter(
                or_(
                    Equipment.estimated_obsolescence_date >= today,
                    Equipment.end_of_sale >= today,
                )
            )
            .all()
        )
    except Exception:
        db.rollback()
        stats["errors"] += 1
        logger.exception("Failed to fetch equipment for obsolescence scan")
        return stats

    return _scan(
        db, equipment, EQUIPMENT_MILESTONES,
        NotificationType.EQUIPMENT_OBSOLESCENCE, "equipment", "equipment_alert_days", now, stats,
    )


def trigger_all_alerts(db: Session, now: datetime | None = None) -> dict:
    """Run both scans sequentially. Call this from a scheduler/cron."""
    now = now or utcnow()
    logger.info("Starting alert scan")
    results = {
        "licenses": scan_license_expiry(db, now=now),
        "equipment": scan_equipment_obsolescence(db, now=now),
    }
    logger.info("Alert scan finished: %s", results)
    return results
