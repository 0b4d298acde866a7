import uuid
from enum import Enum
from typing import Optional
from datetime import date, datetime, time, timezone
from sqlmodel import SQLModel, Field
from sqlalchemy import Index


class Room(str, Enum):
    AULA_MINI = "Lantai 1 - Aula Mini"
    LANTAI_2 = "Lantai 2"
    AULA_BHAKTI_HUSADA = "Lantai 3 - Aula Bhakti Husada"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=_new_id, primary_key=True)
    username: str = Field(index=True, unique=True)
    password_hash: str
    role: str = Field(default=Role.USER.value)
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        # Conflict checks and period deletes both scan by date, then room
        Index("ix_bookings_date_room", "booking_date", "room"),
    )

    id: str = Field(default_factory=_new_id, primary_key=True)
    booking_date: date
    name: str
    room: str
    start_time: time
    end_time: time
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id")

    def ends_at(self) -> datetime:
        return datetime.combine(self.booking_date, self.end_time)
