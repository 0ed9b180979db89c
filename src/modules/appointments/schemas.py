"""Appointments schemas."""

from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.core.config import settings
from src.shared.enums import AppointmentStatus


def to_workshop_time(value: datetime) -> datetime:
    """Return the naive wall-clock time of ``value`` in the workshop's zone."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.default_timezone)).replace(tzinfo=None)


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start: datetime
    end: datetime
    description: str | None = None
    status: AppointmentStatus
    owner_user_id: int | None = Field(default=None, serialization_alias="ownerUserId")


class AppointmentInput(BaseModel):
    """Body shared by create and update; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., max_length=120)
    start: datetime
    end: datetime
    description: str | None = None
    status: AppointmentStatus | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("title cannot be empty")
        return cleaned

    @field_validator("start", "end")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return to_workshop_time(value)

    @model_validator(mode="after")
    def _check_time_order(self):
        if self.start >= self.end:
            raise ValueError("start must be before end")
        return self


class AppointmentCreate(AppointmentInput):
    """Creation body. A supplied ``status`` is validated but never applied."""


class AppointmentUpdate(AppointmentInput):
    pass


class ReservationResult(BaseModel):
    message: str
    appointment: AppointmentPublic
