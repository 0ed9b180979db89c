"""ORM models for the users domain."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database import Base
from src.shared.enums import UserRole, enum_values
from src.shared.models import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only
    from src.modules.appointments.models import Appointment


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            values_callable=enum_values,
            validate_strings=True,
            name="userrole",
        ),
        nullable=False,
        default=UserRole.CLIENTE,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    reservations: Mapped[list[Appointment]] = relationship(back_populates="owner")


# Late import so the relationship target is registered with the mapper.
from src.modules.appointments.models import Appointment  # noqa: E402
