"""Caregiver and patient models."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from careconnect.core.database import Base


class Caregiver(Base):
    """Home care worker who answers check-ins and surveys."""

    __tablename__ = "caregivers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=True)
    state = Column(String(2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    patients = relationship("Patient", back_populates="caregiver")

    def __repr__(self):
        return f"<Caregiver(id={self.id}, name={self.name})>"


class Patient(Base):
    """Patient currently under the care of at most one caregiver."""

    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    medicaid_id = Column(String, nullable=False)
    address = Column(Text, nullable=True)
    caregiver_id = Column(Integer, ForeignKey("caregivers.id", ondelete="SET NULL"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    caregiver = relationship("Caregiver", back_populates="patients")

    def __repr__(self):
        return f"<Patient(id={self.id}, name={self.name})>"
