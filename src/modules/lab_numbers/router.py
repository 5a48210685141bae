"""API endpoints for Lab Numbers module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.modules.lab_numbers.models import LabNumberStatus
from src.modules.lab_numbers.schemas import (
    LabNumberAllocation,
    LabNumberComplete,
    LabNumberCreate,
    LabNumberGenerateRequest,
    LabNumberResponse,
)
from src.modules.lab_numbers.service import LabNumberAllocator, LabNumberService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/lab-numbers", tags=["Lab Numbers"])


# --- Allocation ---


@router.post(
    "/generate",
    response_model=ApiResponse[LabNumberAllocation],
)
async def generate_lab_number(
    data: LabNumberGenerateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue the next lab number for the patient's medical type."""
    allocator = LabNumberAllocator(db)
    allocation = await allocator.allocate(data.medical_type or "", data.passport_number)
    return ApiResponse(
        success=True,
        message="Lab number generated successfully",
        data=allocation,
    )


# --- Register ---


@router.post(
    "",
    response_model=ApiResponse[LabNumberResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_lab_number(
    data: LabNumberCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record an issued lab number."""
    service = LabNumberService(db)
    lab_number = await service.create_lab_number(data)
    return ApiResponse(
        success=True,
        message="Lab number created successfully",
        data=LabNumberResponse.model_validate(lab_number),
    )


@router.get(
    "",
    response_model=ApiResponse[list[LabNumberResponse]],
)
async def list_lab_numbers(
    status_filter: LabNumberStatus | None = Query(None, alias="status"),
    patient: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List recorded lab numbers, newest first."""
    service = LabNumberService(db)
    lab_numbers = await service.list_lab_numbers(status=status_filter, patient=patient)
    return ApiResponse(
        success=True,
        data=[LabNumberResponse.model_validate(n) for n in lab_numbers],
    )


@router.post(
    "/complete",
    response_model=ApiResponse[LabNumberResponse],
)
async def complete_lab_number(
    data: LabNumberComplete,
    db: AsyncSession = Depends(get_db),
):
    """Mark a lab number as completed."""
    service = LabNumberService(db)
    lab_number = await service.mark_completed(data.lab_number)
    return ApiResponse(
        success=True,
        message="Lab number marked as completed",
        data=LabNumberResponse.model_validate(lab_number),
    )


@router.get(
    "/{number}",
    response_model=ApiResponse[LabNumberResponse],
)
async def get_lab_number(
    number: str,
    db: AsyncSession = Depends(get_db),
):
    """Get lab number record by number."""
    service = LabNumberService(db)
    lab_number = await service.get_by_number(number)
    return ApiResponse(
        success=True,
        data=LabNumberResponse.model_validate(lab_number),
    )


@router.delete(
    "/{lab_number_id}",
    response_model=ApiResponse[None],
)
async def delete_lab_number(
    lab_number_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a lab number record."""
    service = LabNumberService(db)
    await service.delete_lab_number(lab_number_id)
    return ApiResponse(
        success=True,
        message="Lab number deleted successfully",
        data=None,
    )
