"""Appointment service layer: the slot reservation state machine."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ConflictError, InputValidationError, InternalError, NotFoundError
from src.modules.appointments.models import Appointment
from src.modules.appointments.repository import AppointmentStore
from src.modules.appointments.schemas import AppointmentCreate, AppointmentUpdate
from src.shared.enums import AppointmentStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESERVED_MESSAGE = "Appointment reserved successfully"


class AppointmentService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = AppointmentStore(db)

    async def list(self) -> list[Appointment]:
        return await self._run(self.store.list)

    async def get(self, appointment_id: int) -> Appointment:
        appointment = await self._run(lambda: self.store.get(appointment_id))
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    async def create(self, payload: AppointmentCreate) -> Appointment:
        # New slots are always open; a requested status is ignored.
        fields = payload.model_dump(include={"title", "start", "end", "description"})
        fields["status"] = AppointmentStatus.AVAILABLE
        fields["owner_user_id"] = None

        async def _insert() -> Appointment:
            appointment = await self.store.insert(fields)
            await self.db.commit()
            return appointment

        appointment = await self._run(_insert)
        logger.info("Appointment %s created for %s", appointment.id, appointment.start.isoformat())
        return appointment

    async def update(self, appointment_id: int, payload: AppointmentUpdate) -> Appointment:
        fields = payload.model_dump(exclude_unset=True)
        if fields.get("status") is None:
            fields.pop("status", None)
        elif fields["status"] == AppointmentStatus.AVAILABLE:
            # Reopening a slot releases its owner.
            fields["owner_user_id"] = None

        async def _update() -> Appointment | None:
            current = await self.store.get(appointment_id)
            if current is None:
                return None
            if fields.get("status") == AppointmentStatus.RESERVED and current.status != AppointmentStatus.RESERVED:
                # Only reserve() may bind an owner to a slot.
                raise InputValidationError("Slots become RESERVED only through a reservation")
            appointment = await self.store.update(appointment_id, fields)
            if appointment is not None:
                await self.db.commit()
            return appointment

        appointment = await self._run(_update)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    async def delete(self, appointment_id: int) -> None:
        async def _delete() -> bool:
            deleted = await self.store.delete(appointment_id)
            await self.db.commit()
            return deleted

        if not await self._run(_delete):
            raise NotFoundError("Appointment not found")
        logger.info("Appointment %s deleted", appointment_id)

    async def reserve(self, appointment_id: int, user_id: int) -> Appointment:
        """Bind an AVAILABLE slot to ``user_id``.

        The status check and the write are one conditional UPDATE, so among
        concurrent callers only the first committed one wins; the rest get a
        ConflictError and the existing owner is never overwritten.
        """

        async def _reserve() -> tuple[bool, Appointment | None]:
            won = await self.store.mark_reserved(appointment_id, user_id)
            if won:
                await self.db.commit()
                return True, await self.store.get(appointment_id)
            current = await self.store.get(appointment_id)
            # Zero rows matched, so there is nothing to undo; just end the transaction.
            await self.db.commit()
            return False, current

        won, appointment = await self._run(_reserve)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        if not won:
            logger.info(
                "Reservation of appointment %s by user %s rejected: %s",
                appointment_id,
                user_id,
                appointment.status,
            )
            raise ConflictError("Appointment is no longer available")
        logger.info("Appointment %s reserved by user %s", appointment_id, user_id)
        return appointment

    async def _run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run a store operation, turning storage failures into InternalError."""
        try:
            return await operation()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Storage failure in appointment service")
            raise InternalError("Internal error while accessing appointments") from exc
