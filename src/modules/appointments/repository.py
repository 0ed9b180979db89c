"""Persistence for appointment rows.

The store only flushes; committing or rolling back is the caller's job so a
service operation stays a single transaction.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.appointments.models import Appointment
from src.shared.enums import AppointmentStatus


class AppointmentStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> list[Appointment]:
        stmt = select(Appointment).order_by(Appointment.start, Appointment.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, appointment_id: int) -> Appointment | None:
        stmt = (
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def insert(self, fields: dict[str, Any]) -> Appointment:
        appointment = Appointment(**fields)
        self.db.add(appointment)
        await self.db.flush()
        await self.db.refresh(appointment)
        return appointment

    async def update(self, appointment_id: int, fields: dict[str, Any]) -> Appointment | None:
        appointment = await self.get(appointment_id)
        if appointment is None:
            return None
        for key, value in fields.items():
            setattr(appointment, key, value)
        await self.db.flush()
        await self.db.refresh(appointment)
        return appointment

    async def delete(self, appointment_id: int) -> bool:
        result = await self.db.execute(
            delete(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_reserved(self, appointment_id: int, user_id: int) -> bool:
        """Flip an AVAILABLE slot to RESERVED for ``user_id`` in one statement.

        Returns False when no row matched, either because the id is unknown or
        because the slot is no longer AVAILABLE.
        """
        result = await self.db.execute(
            update(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.status == AppointmentStatus.AVAILABLE,
            )
            .values(status=AppointmentStatus.RESERVED, owner_user_id=user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
