"""Alertable asset models: software licenses and hardware equipment."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from bridge_lfu.database import Base


class LicenseStatus(str, enum.Enum):
    ACTIVE = "active"
    ABOUT_TO_EXPIRE = "about_to_expire"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class EquipmentStatus(str, enum.Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    SOON_OBSOLETE = "soon_obsolete"
    OBSOLETE = "obsolete"
    RETIRED = "retired"


class License(Base):
    """Software license held by a client."""

    __tablename__ = "licenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    editor = Column(String(255))
    expiry_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), default=LicenseStatus.ACTIVE.value)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="licenses")


class Equipment(Base):
    """Hardware unit installed at a client."""

    __tablename__ = "equipment"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    brand = Column(String(100))
    model = Column(String(100))
    estimated_obsolescence_date = Column(Date, index=True)
    end_of_sale = Column(Date, index=True)
    status = Column(String(20), default=EquipmentStatus.ACTIVE.value)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="equipment")
