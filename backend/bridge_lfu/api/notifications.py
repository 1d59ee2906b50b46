"""Notification API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bridge_lfu.api.deps import get_db, get_verified_user, require_permission
from bridge_lfu.models.notification import NotificationType
from bridge_lfu.models.user import Profile
from bridge_lfu.schemas.notification import (
    AlertSettingsResponse,
    AlertSettingsUpdate,
    DispatchStats,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationPage,
    NotificationResponse,
    NotificationStats,
    NotificationUpdate,
)
from bridge_lfu.services import notification_store
from bridge_lfu.services.account_alerts import notify_user
from bridge_lfu.services.alert_settings import get_alert_settings, update_alert_settings
from bridge_lfu.services.notification_email_job import get_notification_email_job
from bridge_lfu.services.permissions import can

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _ensure_can_read_own(user: Profile) -> None:
    if not can(user, "read", "notifications", {"user_id": user.id}):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")


def _get_owned_notification(db: Session, user: Profile, notification_id: str):
    notification = notification_store.get_user_notification(db, user.id, notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationPage)
def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    is_read: bool | None = None,
    type: NotificationType | None = None,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Get the current user's notifications, newest first."""
    _ensure_can_read_own(current_user)
    result = notification_store.list_user_notifications(
        db,
        current_user.id,
        is_read=is_read,
        notification_type=type.value if type else None,
        page=page,
        limit=limit,
    )
    result["data"] = [NotificationResponse.model_validate(n) for n in result["data"]]
    return NotificationPage(**result)


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_permission("create", "notifications")),
):
    """Send a notification to a user (admin and technician only)."""
    if db.get(Profile, payload.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    notification = notify_user(
        db,
        user_id=payload.user_id,
        notification_type=payload.type.value,
        title=payload.title,
        message=payload.message,
        related_id=payload.related_id,
        related_type=payload.related_type,
        send_immediately=payload.send_email,
    )
    if notification is None:
        raise HTTPException(status_code=500, detail="Notification could not be created")
    return notification


@router.get("/stats", response_model=NotificationStats)
def get_stats(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Count the current user's notifications by state and type."""
    _ensure_can_read_own(current_user)
    return notification_store.get_notification_stats(db, current_user.id)


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Mark all of the current user's notifications as read."""
    updated = notification_store.mark_all_read(db, current_user.id)
    return MarkAllReadResponse(message="All notifications marked as read", updated_count=updated)


@router.get("/settings", response_model=AlertSettingsResponse)
def read_alert_settings(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Get the current user's alert settings, creating defaults on first access."""
    return get_alert_settings(db, current_user.id)


@router.put("/settings", response_model=AlertSettingsResponse)
def write_alert_settings(
    payload: AlertSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Update the current user's alert settings. Omitted fields are unchanged."""
    return update_alert_settings(db, current_user.id, payload.model_dump(exclude_unset=True))


@router.post("/process-emails", response_model=DispatchStats)
def process_emails(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_permission("manage", "system_settings")),
):
    """Run the pending-email batch now (admin only)."""
    return get_notification_email_job().process_unsent(db)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Mark a notification as read."""
    notification = _get_owned_notification(db, current_user, notification_id)
    return notification_store.mark_read(db, notification)


@router.patch("/{notification_id}", response_model=NotificationResponse)
def update_notification(
    notification_id: str,
    payload: NotificationUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Set the read state of a notification."""
    notification = _get_owned_notification(db, current_user, notification_id)
    return notification_store.mark_read(db, notification, payload.is_read)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_verified_user),
):
    """Delete one of the current user's notifications."""
    notification = _get_owned_notification(db, current_user, notification_id)
    notification_store.delete_notification(db, notification)
