"""Lab number models and classification enums."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class MedicalType(StrEnum):
    """Medical examination types known to the phlebotomy desk."""

    SM_VDRL = "SM-VDRL"
    MAURITIUS = "MAURITIUS"
    NORMAL = "NORMAL"
    MEDICAL = "MEDICAL"
    FM = "FM"


class Series(StrEnum):
    """Lab number series. Each series draws from its own counter."""

    S = "S"
    F = "F"

    @property
    def counter_name(self) -> str:
        return f"{self.value}_SERIES"


class LabNumberStatus(StrEnum):
    """Lab number processing status."""

    PENDING = "pending"
    COMPLETED = "completed"


class LabNumber(BaseModel):
    """Lab number recorded against a patient at the phlebotomy desk."""

    __tablename__ = "lab_numbers"

    number: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )  # LAB-<passport>-<series><NNN>
    patient: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    medical_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="N/A", index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LabNumberStatus.PENDING.value, index=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("ix_lab_numbers_created_at", "created_at"),)
