"""Per-user alert threshold resolution.

Settings rows are created lazily with defaults the first time they are needed,
so a missing row is never an error for callers.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bridge_lfu.models.alert_settings import (
    DEFAULT_EQUIPMENT_ALERT_DAYS,
    DEFAULT_LICENSE_ALERT_DAYS,
    AlertSettings,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("license_alert_days", "equipment_alert_days", "email_enabled")


def _find_settings(db: Session, user_id: str) -> AlertSettings | None:
    return db.query(AlertSettings).filter(AlertSettings.user_id == user_id).first()


def get_alert_settings(db: Session, user_id: str) -> AlertSettings:
    """Read a user's settings, creating the default row if none exists.

    The insert runs in a savepoint: if a concurrent caller created the row
    first, the unique violation is rolled back and the winner's row is read.
    """
    settings = _find_settings(db, user_id)
    if settings:
        return settings

    settings = AlertSettings(user_id=user_id, email_enabled=True)
    settings.license_alert_days = DEFAULT_LICENSE_ALERT_DAYS
    settings.equipment_alert_days = DEFAULT_EQUIPMENT_ALERT_DAYS
    try:
        with db.begin_nested():
            db.add(settings)
        db.commit()
    except IntegrityError:
        logger.info("Alert settings for user %s created concurrently, re-reading", user_id)
        existing = _find_settings(db, user_id)
        if existing is None:
            raise
        return existing

    db.refresh(settings)
    logger.debug("Created default alert settings for user %s", user_id)
    return settings


def update_alert_settings(db: Session, user_id: str, changes: dict) -> AlertSettings:
    """Merge a partial update into a user's settings and persist it.

    Only keys present in ``changes`` are touched; None values are ignored.
    """
    settings = get_alert_settings(db, user_id)

    for field in UPDATABLE_FIELDS:
        value = changes.get(field)
        if value is None:
            continue
        if field == "email_enabled":
            settings.email_enabled = bool(value)
        else:
            days = [int(day) for day in value]
            if any(day <= 0 for day in days):
                raise ValueError(f"{field} must contain positive integers")
            setattr(settings, field, days)

    db.commit()
    db.refresh(settings)
    return settings
