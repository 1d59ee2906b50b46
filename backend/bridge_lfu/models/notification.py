"""Notification model for asset alerts and account events."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text

from bridge_lfu.database import Base


class NotificationType(str, enum.Enum):
    LICENSE_EXPIRY = "license_expiry"
    EQUIPMENT_OBSOLESCENCE = "equipment_obsolescence"
    GENERAL = "general"
    NEW_UNVERIFIED_USER = "new_unverified_user"


class AlertMilestone(str, enum.Enum):
    """Asset date that produced an alert."""

    EXPIRY = "expiry"
    OBSOLESCENCE = "obsolescence"
    END_OF_SALE = "end_of_sale"


class Notification(Base):
    """In-app notification, optionally delivered by email."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read"),
        Index("ix_notifications_dedup", "user_id", "type", "related_id", "milestone", "created_at"),
        Index("ix_notifications_email_pending", "email_sent", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    type = Column(String(50), nullable=False)

    # Content, never updated after creation
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Context
    related_id = Column(String(36))
    related_type = Column(String(50))  # license, equipment, user
    milestone = Column(String(20))

    # Status
    is_read = Column(Boolean, nullable=False, default=False)
    email_sent = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
