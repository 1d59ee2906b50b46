"""User profile model."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from bridge_lfu.database import Base


class Role(str, enum.Enum):
    """Account roles. A new account stays unverified until an admin validates it."""

    ADMIN = "admin"
    TECHNICIAN = "technician"
    CLIENT = "client"
    UNVERIFIED = "unverified"


STAFF_ROLES = (Role.ADMIN, Role.TECHNICIAN)


class Profile(Base):
    """User account profile."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    role = Column(String(20), nullable=False, default=Role.UNVERIFIED.value, index=True)
    # Only meaningful for role=client
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="profiles")
    notifications = relationship("Notification", backref="user", cascade="all, delete-orphan")
    alert_settings = relationship("AlertSettings", back_populates="user", uselist=False, cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        """Full name for greetings, falling back to a generic label."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or "User"
