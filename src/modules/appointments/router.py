"""Appointments API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.deps import RequestContext, require_authenticated, require_negocio
from src.modules.appointments.models import Appointment
from src.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentUpdate,
    ReservationResult,
)
from src.modules.appointments.service import RESERVED_MESSAGE, AppointmentService

router = APIRouter(prefix="/appointments", tags=["appointments"])


def get_service(db: AsyncSession = Depends(get_db)) -> AppointmentService:
    return AppointmentService(db)


@router.get("", response_model=list[AppointmentPublic])
async def list_appointments(
    service: AppointmentService = Depends(get_service),
) -> list[Appointment]:
    return await service.list()


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreate,
    _: RequestContext = Depends(require_negocio),
    service: AppointmentService = Depends(get_service),
) -> Appointment:
    return await service.create(payload)


@router.put("/reserve/{appointment_id}", response_model=ReservationResult)
async def reserve_appointment(
    appointment_id: int,
    context: RequestContext = Depends(require_authenticated),
    service: AppointmentService = Depends(get_service),
) -> ReservationResult:
    appointment = await service.reserve(appointment_id, context.user_id)
    return ReservationResult(
        message=RESERVED_MESSAGE,
        appointment=AppointmentPublic.model_validate(appointment),
    )


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_service),
) -> Appointment:
    return await service.get(appointment_id)


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    _: RequestContext = Depends(require_negocio),
    service: AppointmentService = Depends(get_service),
) -> Appointment:
    return await service.update(appointment_id, payload)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: int,
    _: RequestContext = Depends(require_negocio),
    service: AppointmentService = Depends(get_service),
) -> None:
    await service.delete(appointment_id)
