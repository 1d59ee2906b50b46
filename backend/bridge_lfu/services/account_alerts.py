"""Ad-hoc notifications: manual alerts and account lifecycle events."""
import logging

from sqlalchemy.orm import Session

from bridge_lfu.models.notification import Notification, NotificationType
from bridge_lfu.models.user import Profile, Role
from bridge_lfu.services.notification_email_job import NotificationEmailJob, get_notification_email_job
from bridge_lfu.services.notification_store import create_notification, delete_related_notifications

logger = logging.getLogger(__name__)


def notify_user(
    db: Session,
    user_id: str,
    notification_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_type: str | None = None,
    send_immediately: bool = False,
    job: NotificationEmailJob | None = None,
) -> Notification | None:
    """Create a notification, optionally emailing it now instead of on the next batch."""
    if send_immediately:
        job = job or get_notification_email_job()
        return job.create_and_send_notification(
            db, user_id, notification_type, title, message, related_id, related_type
        )
    return create_notification(
        db,
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        message=message,
        related_id=related_id,
        related_type=related_type,
    )


def notify_new_unverified_user(
    db: Session,
    new_user: Profile,
    job: NotificationEmailJob | None = None,
) -> list[Notification]:
    """Tell every admin that an account is waiting for validation."""
    admins = db.query(Profile).filter(Profile.role == Role.ADMIN.value).all()
    name = " ".join(part for part in (new_user.first_name, new_user.last_name) if part) or new_user.email

    created = []
    for admin in admins:
        notification = notify_user(
            db,
            user_id=admin.id,
            notification_type=NotificationType.NEW_UNVERIFIED_USER.value,
            title="New user awaiting validation",
            message=f"{name} ({new_user.email}) is waiting for validation",
            related_id=new_user.id,
            related_type="user",
            send_immediately=True,
            job=job,
        )
        if notification is not None:
            created.append(notification)

    logger.info("Notified %d admins about unverified user %s", len(created), new_user.id)
    return created


def notify_user_verified(db: Session, user: Profile) -> Notification:
    """Welcome a validated user and clear the pending validation alerts about them."""
    removed = delete_related_notifications(db, NotificationType.NEW_UNVERIFIED_USER.value, user.id)
    logger.info("Removed %d pending validation notifications for user %s", removed, user.id)

    return create_notification(
        db,
        user_id=user.id,
        notification_type=NotificationType.GENERAL.value,
        title="Account verified",
        message=(
            f"Your account has been verified with the role {user.role}. "
            "You can now access the platform."
        ),
        related_id=user.id,
        related_type="user",
    )
