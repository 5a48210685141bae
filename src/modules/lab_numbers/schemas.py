"""Schemas for Lab Numbers module."""

from datetime import datetime

from pydantic import Field

from src.modules.lab_numbers.models import LabNumberStatus, Series
from src.shared.schemas import CamelSchema


# --- Allocation Schemas ---


class LabNumberGenerateRequest(CamelSchema):
    """Request to issue the next lab number for a patient."""

    # Any value is accepted; unknown or missing types use the fallback series
    medical_type: str | None = None
    passport_number: str = Field(..., min_length=1, max_length=50)
    # Sent by the phlebotomy page, not used for allocation
    patient_id: str | None = None


class LabNumberAllocation(CamelSchema):
    """Result of a lab number allocation."""

    lab_number: str
    series: Series
    sequence_number: int


# --- Register Schemas ---


class LabNumberCreate(CamelSchema):
    """Schema for recording an issued lab number."""

    number: str = Field(..., min_length=1, max_length=100)
    patient: str = Field(..., min_length=1, max_length=200)
    medical_type: str = Field("N/A", min_length=1, max_length=50)


class LabNumberComplete(CamelSchema):
    """Schema for marking a lab number as completed."""

    lab_number: str = Field(..., min_length=1, max_length=100)


class LabNumberResponse(CamelSchema):
    """Schema for lab number response."""

    id: int
    number: str
    patient: str
    medical_type: str
    status: LabNumberStatus
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
