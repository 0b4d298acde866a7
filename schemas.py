from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models import Room, Role


def check_wall_clock_time(value: Optional[time]) -> Optional[time]:
    """Booked times are local wall-clock times at whole-second precision."""
    if value is None:
        return value
    if value.tzinfo is not None:
        raise ValueError("time must not carry a UTC offset")
    if value.microsecond:
        raise ValueError("time must not have fractional seconds")
    return value


class BookingBase(BaseModel):
    booking_date: date
    name: str = Field(min_length=1)
    room: Room
    start_time: time
    end_time: time
    description: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value):
        return check_wall_clock_time(value)


class BookingCreate(BookingBase):
    @model_validator(mode="after")
    def check_time_range(self):
        if self.start_time >= self.end_time:
            raise ValueError("end_time must be after start_time")
        return self


class BookingUpdate(BaseModel):
    """Only the fields that are sent get replaced."""

    booking_date: Optional[date] = None
    name: Optional[str] = Field(default=None, min_length=1)
    room: Optional[Room] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    description: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value):
        return check_wall_clock_time(value)


class BookingRead(BookingBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    user_id: Optional[str] = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    role: Role


class BulkDeleteResult(BaseModel):
    start: date
    end: date
    deleted: int
