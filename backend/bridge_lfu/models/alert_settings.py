"""Per-user alert threshold settings."""
import json
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from bridge_lfu.database import Base

DEFAULT_LICENSE_ALERT_DAYS = (7, 30)
DEFAULT_EQUIPMENT_ALERT_DAYS = (30, 90)


class AlertSettings(Base):
    """Which day-counts trigger alerts for a user, and whether to email them."""

    __tablename__ = "notification_settings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False)
    license_alert_days_json = Column("license_alert_days", Text, nullable=False, default=lambda: json.dumps(list(DEFAULT_LICENSE_ALERT_DAYS)))
    equipment_alert_days_json = Column("equipment_alert_days", Text, nullable=False, default=lambda: json.dumps(list(DEFAULT_EQUIPMENT_ALERT_DAYS)))
    email_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("Profile", back_populates="alert_settings")

    @property
    def license_alert_days(self) -> list[int]:
        return json.loads(self.license_alert_days_json or "[]")

    @license_alert_days.setter
    def license_alert_days(self, days) -> None:
        self.license_alert_days_json = json.dumps(sorted(set(days)))

    @property
    def equipment_alert_days(self) -> list[int]:
        return json.loads(self.equipment_alert_days_json or "[]")

    @equipment_alert_days.setter
    def equipment_alert_days(self, days) -> None:
        self.equipment_alert_days_json = json.dumps(sorted(set(days)))
