"""Notification persistence and queries."""
import math
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from bridge_lfu.models.notification import Notification, NotificationType

MAX_PAGE_SIZE = 100


def create_notification(
    db: Session,
    user_id: str,
    notification_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_type: str | None = None,
    milestone: str | None = None,
    email_sent: bool = False,
    created_at: datetime | None = None,
) -> Notification:
    """Create an in-app notification."""
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        related_id=related_id,
        related_type=related_type,
        milestone=milestone,
        email_sent=email_sent,
    )
    if created_at is not None:
        notification.created_at = created_at
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def find_recent_notification(
    db: Session,
    user_id: str,
    notification_type: str,
    related_id: str,
    since: datetime,
    milestone: str | None = None,
) -> Notification | None:
    """Return a notification for the same user, type and asset created after ``since``."""
    query = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.type == notification_type,
        Notification.related_id == related_id,
        Notification.created_at >= since,
    )
    if milestone is not None:
        query = query.filter(Notification.milestone == milestone)
    return query.order_by(Notification.created_at.desc()).first()


def get_unsent_notifications(db: Session, limit: int) -> list[Notification]:
    """Oldest notifications still waiting for an email delivery attempt."""
    return (
        db.query(Notification)
        .filter(Notification.email_sent.is_(False))
        .order_by(Notification.created_at.asc())
        .limit(limit)
        .all()
    )


def mark_email_sent(db: Session, notification: Notification) -> None:
    notification.email_sent = True
    db.commit()


def list_user_notifications(
    db: Session,
    user_id: str,
    is_read: bool | None = None,
    notification_type: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """Page through a user's notifications, newest first."""
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    page = max(1, page)
    offset = (page - 1) * limit

    query = db.query(Notification).filter(Notification.user_id == user_id)
    if is_read is not None:
        query = query.filter(Notification.is_read.is_(is_read))
    if notification_type is not None:
        query = query.filter(Notification.type == notification_type)

    count = query.count()
    items = (
        query.order_by(Notification.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {
        "data": items,
        "count": count,
        "page": page,
        "total_pages": math.ceil(count / limit),
        "has_more": offset + limit < count,
    }


def get_user_notification(db: Session, user_id: str, notification_id: str) -> Notification | None:
    return db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()


def mark_read(db: Session, notification: Notification, is_read: bool = True) -> Notification:
    notification.is_read = is_read
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    """Mark every unread notification of a user as read. Returns the count updated."""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, notification: Notification) -> None:
    db.delete(notification)
    db.commit()


def delete_related_notifications(db: Session, notification_type: str, related_id: str) -> int:
    deleted = (
        db.query(Notification)
        .filter(Notification.type == notification_type, Notification.related_id == related_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def get_notification_stats(db: Session, user_id: str) -> dict:
    """Count a user's notifications by read state and by type."""
    rows = (
        db.query(Notification.type, Notification.is_read, func.count(Notification.id))
        .filter(Notification.user_id == user_id)
        .group_by(Notification.type, Notification.is_read)
        .all()
    )

    by_type = {notification_type.value: 0 for notification_type in NotificationType}
    read = unread = 0
    for notification_type, is_read, count in rows:
        by_type[notification_type] = by_type.get(notification_type, 0) + count
        if is_read:
            read += count
        else:
            unread += count

    return {
        "total": read + unread,
        "unread": unread,
        "read": read,
        "by_type": by_type,
    }
