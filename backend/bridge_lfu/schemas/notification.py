"""Notification and alert-settings schemas."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from bridge_lfu.models.notification import NotificationType


class NotificationResponse(BaseModel):
    """Notification as exposed to the UI; every stored field is kept."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    related_id: str | None = None
    related_type: str | None = None
    milestone: str | None = None
    is_read: bool
    email_sent: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationPage(BaseModel):
    data: list[NotificationResponse]
    count: int
    page: int
    total_pages: int
    has_more: bool


class NotificationCreate(BaseModel):
    """Manual notification sent by staff to a user."""

    user_id: str
    type: NotificationType = NotificationType.GENERAL
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    related_id: str | None = None
    related_type: str | None = None
    send_email: bool = False


class NotificationUpdate(BaseModel):
    is_read: bool


class NotificationStats(BaseModel):
    total: int
    unread: int
    read: int
    by_type: dict[str, int]


class MarkAllReadResponse(BaseModel):
    message: str
    updated_count: int


class AlertSettingsResponse(BaseModel):
    user_id: str
    license_alert_days: list[int]
    equipment_alert_days: list[int]
    email_enabled: bool
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class AlertSettingsUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    license_alert_days: list[int] | None = None
    equipment_alert_days: list[int] | None = None
    email_enabled: bool | None = None

    @field_validator("license_alert_days", "equipment_alert_days")
    @classmethod
    def validate_days(cls, v: list[int] | None) -> list[int] | None:
        if v is None:
            return v
        if any(day <= 0 for day in v):
            raise ValueError("Alert days must be positive integers")
        return sorted(set(v))


class DispatchStats(BaseModel):
    processed: int
    sent: int
    failed: int
    skipped: int


class ScanStats(BaseModel):
    assets: int
    created: int
    duplicates: int
    errors: int


class AlertScanResult(BaseModel):
    licenses: ScanStats
    equipment: ScanStats


class CronRunResponse(BaseModel):
    success: bool
    message: str
    alert_stats: AlertScanResult
    email_stats: DispatchStats
