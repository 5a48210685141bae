"""Service for Lab Numbers module."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.counters.service import CounterService
from src.core.exceptions import CounterUnavailableError, DuplicateError, NotFoundError
from src.modules.lab_numbers.models import LabNumber, LabNumberStatus, MedicalType, Series
from src.modules.lab_numbers.schemas import LabNumberAllocation, LabNumberCreate

logger = logging.getLogger(__name__)


# ── Series classification ──────────────────────────────

SERIES_BY_MEDICAL_TYPE: dict[MedicalType, Series] = {
    MedicalType.SM_VDRL: Series.S,
    MedicalType.MAURITIUS: Series.F,
    MedicalType.NORMAL: Series.F,
    MedicalType.MEDICAL: Series.F,
    MedicalType.FM: Series.F,
}

# Used for medical types missing from SERIES_BY_MEDICAL_TYPE.
# TODO: confirm the F-series fallback with the lab before onboarding new medical types.
FALLBACK_SERIES = Series.F

SEQUENCE_WIDTH = 3


def classify_medical_type(medical_type: str) -> Series:
    """Map a medical type to its lab number series."""
    try:
        known = MedicalType(medical_type)
    except ValueError:
        logger.info(
            "Unknown medical type %r, using %s series", medical_type, FALLBACK_SERIES.value
        )
        return FALLBACK_SERIES
    return SERIES_BY_MEDICAL_TYPE[known]


def format_lab_number(passport_number: str, series: Series, sequence_number: int) -> str:
    """
    Build LAB-<passport>-<series><NNN>.

    Sequence numbers are zero-padded to three digits; wider numbers keep all
    their digits (1000 -> "1000").
    """
    return f"LAB-{passport_number}-{series.value}{sequence_number:0{SEQUENCE_WIDTH}d}"


class LabNumberAllocator:
    """Issues lab numbers from the per-series counters."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.counters = CounterService(db)

    async def allocate(self, medical_type: str, passport_number: str) -> LabNumberAllocation:
        """
        Issue the next lab number for a patient.

        Exactly one counter increment per successful call. The increment is
        committed before the number is returned; on CounterUnavailableError
        the transaction is rolled back and no number is issued.
        """
        series = classify_medical_type(medical_type)
        counter_name = series.counter_name

        sequence_number = await self.counters.increment_and_get(counter_name)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Commit of counter %s failed", counter_name)
            await self.db.rollback()
            raise CounterUnavailableError(counter_name) from exc

        lab_number = format_lab_number(passport_number, series, sequence_number)
        logger.info("Issued lab number %s (medical type %r)", lab_number, medical_type)

        return LabNumberAllocation(
            lab_number=lab_number,
            series=series,
            sequence_number=sequence_number,
        )


class LabNumberService:
    """Service for the register of issued lab numbers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _number_taken(self, number: str) -> bool:
        existing = await self.db.execute(select(LabNumber.id).where(LabNumber.number == number))
        return existing.scalar_one_or_none() is not None

    async def create_lab_number(self, data: LabNumberCreate) -> LabNumber:
        """
        Record an issued lab number as pending.

        The unique index on ``number`` decides between concurrent creates;
        the loser gets DuplicateError like a sequential duplicate.
        """
        if await self._number_taken(data.number):
            raise DuplicateError("Lab number", "number", data.number)

        lab_number = LabNumber(
            number=data.number,
            patient=data.patient,
            medical_type=data.medical_type,
            status=LabNumberStatus.PENDING.value,
        )
        self.db.add(lab_number)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise DuplicateError("Lab number", "number", data.number) from exc
        await self.db.refresh(lab_number)
        return lab_number

    async def list_lab_numbers(
        self,
        status: LabNumberStatus | None = None,
        patient: str | None = None,
    ) -> list[LabNumber]:
        """List lab numbers, newest first."""
        query = select(LabNumber).order_by(LabNumber.created_at.desc(), LabNumber.id.desc())
        if status is not None:
            query = query.where(LabNumber.status == status.value)
        if patient is not None:
            query = query.where(LabNumber.patient == patient)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_number(self, number: str) -> LabNumber:
        """Get lab number record by its number."""
        result = await self.db.execute(select(LabNumber).where(LabNumber.number == number))
        lab_number = result.scalar_one_or_none()
        if not lab_number:
            raise NotFoundError("Lab number", number)
        return lab_number

    async def mark_completed(self, number: str) -> LabNumber:
        """Mark a lab number as completed."""
        lab_number = await self.get_by_number(number)
        lab_number.status = LabNumberStatus.COMPLETED.value
        lab_number.completed_at = datetime.now(timezone.utc)

        await self.db.commit()
        await self.db.refresh(lab_number)
        return lab_number

    async def delete_lab_number(self, lab_number_id: int) -> None:
        """Delete a lab number record."""
        lab_number = await self.db.get(LabNumber, lab_number_id)
        if not lab_number:
            raise NotFoundError("Lab number", lab_number_id)

        await self.db.delete(lab_number)
        await self.db.commit()
