"""Client model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from bridge_lfu.database import Base


class Client(Base):
    """Customer company owning licenses and equipment."""

    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    contact_email = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    profiles = relationship("Profile", back_populates="client")
    licenses = relationship("License", back_populates="client", cascade="all, delete-orphan")
    equipment = relationship("Equipment", back_populates="client", cascade="all, delete-orphan")
