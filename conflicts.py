from typing import Iterable, Optional

from periods import SchedulingError


class BookingConflict(SchedulingError):
    def __init__(self, room, booking_date, start_time, end_time):
        self.room = room
        self.booking_date = booking_date
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"Room {room} is already booked on {booking_date} "
            f"from {start_time} to {end_time}"
        )


def overlaps(s1, e1, s2, e2) -> bool:
    # half-open ranges: back-to-back slots do not overlap
    return s1 < e2 and s2 < e1


def find_conflict(
    booking_date,
    room,
    start_time,
    end_time,
    existing: Iterable,
    exclude_id: Optional[str] = None,
):
    """
    Return the first booking in `existing` that collides with the candidate
    range on the same date and room, or None.

    Dates and times may be date/time objects or zero-padded ISO strings, as
    long as candidate and existing records use the same kind.
    """
    for booking in existing:
        if exclude_id is not None and booking.id == exclude_id:
            continue
        if booking.booking_date != booking_date or booking.room != room:
            continue
        if overlaps(start_time, end_time, booking.start_time, booking.end_time):
            return booking
    return None


def conflicts(booking_date, room, start_time, end_time, existing, exclude_id=None) -> bool:
    return find_conflict(booking_date, room, start_time, end_time, existing, exclude_id) is not None


def ensure_no_conflict(booking_date, room, start_time, end_time, existing, exclude_id=None) -> None:
    clash = find_conflict(booking_date, room, start_time, end_time, existing, exclude_id)
    if clash is not None:
        raise BookingConflict(
            clash.room, clash.booking_date, clash.start_time, clash.end_time
        )
