"""Appointment ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database import Base
from src.shared.enums import AppointmentStatus, enum_values
from src.shared.models import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from src.modules.users.models import User


class Appointment(Base, TimestampMixin):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_start_time", "start_time"),
        CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    # Wall-clock time in the workshop's timezone.
    start: Mapped[datetime] = mapped_column("start_time", DateTime, nullable=False)
    end: Mapped[datetime] = mapped_column("end_time", DateTime, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            values_callable=enum_values,
            validate_strings=True,
            name="appointmentstatus",
        ),
        nullable=False,
        default=AppointmentStatus.AVAILABLE,
    )
    owner_user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    owner: Mapped[User | None] = relationship(back_populates="reservations")


from src.modules.users.models import User  # noqa: E402
