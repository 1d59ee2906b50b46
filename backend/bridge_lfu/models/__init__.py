"""SQLAlchemy models package."""
from bridge_lfu.models.user import Profile, Role
from bridge_lfu.models.client import Client
from bridge_lfu.models.asset import Equipment, EquipmentStatus, License, LicenseStatus
from bridge_lfu.models.notification import AlertMilestone, Notification, NotificationType
from bridge_lfu.models.alert_settings import AlertSettings

__all__ = [
    "Profile",
    "Role",
    "Client",
    "License",
    "LicenseStatus",
    "Equipment",
    "EquipmentStatus",
    "Notification",
    "NotificationType",
    "AlertMilestone",
    "AlertSettings",
]
