import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import FastAPI, Depends, HTTPException, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import select
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from config import ADMIN_USERNAME, ADMIN_PASSWORD, CORS_ORIGINS, configure_logging
from database import init_db, get_session, async_session
from models import Booking, Room, Role, User
from schemas import BookingCreate, BookingUpdate, BookingRead, BulkDeleteResult, UserRead
from auth import ensure_user, get_current_user, require_admin
from conflicts import BookingConflict, ensure_no_conflict
from periods import InvalidPeriodSelector, Period, resolve_period
from exporting import bookings_to_csv, export_filename

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Room Reservation System")


@app.on_event("startup")
async def on_startup():
    await init_db()
    if ADMIN_USERNAME and ADMIN_PASSWORD:
        async with async_session() as session:
            await ensure_user(session, ADMIN_USERNAME, ADMIN_PASSWORD, Role.ADMIN)


@app.exception_handler(BookingConflict)
async def booking_conflict_handler(request: Request, exc: BookingConflict):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(InvalidPeriodSelector)
async def invalid_period_handler(request: Request, exc: InvalidPeriodSelector):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# --- Helpers ---
async def bookings_on(session: AsyncSession, booking_date: date, room: str) -> List[Booking]:
    statement = select(Booking).where(Booking.booking_date == booking_date, Booking.room == room)
    result = await session.execute(statement)
    return result.scalars().all()


async def get_booking_or_404(session: AsyncSession, booking_id: str) -> Booking:
    booking = await session.get(Booking, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def matches_search(booking: Booking, term: str) -> bool:
    needle = term.lower()
    return (
        needle in booking.name.lower()
        or needle in booking.room.lower()
        or (booking.description is not None and needle in booking.description.lower())
        or term in booking.booking_date.isoformat()
    )


def period_selector(
    year: Optional[int] = Query(default=None),
    month: Optional[int] = Query(default=None),
    quarter: Optional[int] = Query(default=None),
) -> Period:
    return resolve_period(year=year, month=month, quarter=quarter)


# --- Endpoints ---
@app.get("/rooms", response_model=List[str])
async def get_rooms():
    return [room.value for room in Room]


@app.get("/me", response_model=UserRead)
async def get_me(user: User = Depends(get_current_user)):
    return user


@app.get("/bookings", response_model=List[BookingRead])
async def list_bookings(
    q: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    # Newest dates first, each day in start order
    statement = select(Booking).order_by(Booking.booking_date.desc(), Booking.start_time)
    result = await session.execute(statement)
    bookings = result.scalars().all()

    if q:
        bookings = [b for b in bookings if matches_search(b, q)]

    if user.is_admin:
        return bookings

    # Regular users only see bookings that have not finished yet
    now = datetime.now()
    return [b for b in bookings if b.ends_at() > now]


@app.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    room = booking_data.room.value
    existing = await bookings_on(session, booking_data.booking_date, room)
    try:
        ensure_no_conflict(
            booking_data.booking_date, room,
            booking_data.start_time, booking_data.end_time,
            existing,
        )
    except BookingConflict:
        logger.warning(
            "Rejected booking by %s: %s on %s %s-%s overlaps an existing booking",
            user.username, room, booking_data.booking_date,
            booking_data.start_time, booking_data.end_time,
        )
        raise

    new_booking = Booking(
        booking_date=booking_data.booking_date,
        name=booking_data.name,
        room=room,
        start_time=booking_data.start_time,
        end_time=booking_data.end_time,
        description=booking_data.description,
        user_id=user.id,
    )
    session.add(new_booking)
    await session.commit()
    await session.refresh(new_booking)
    logger.info("Booking %s created by %s", new_booking.id, user.username)
    return new_booking


@app.patch("/bookings/{booking_id}", response_model=BookingRead)
async def update_booking(
    booking_id: str,
    booking_data: BookingUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    booking = await get_booking_or_404(session, booking_id)
    # description may be cleared with null, the other fields may not
    changes = {
        field: value
        for field, value in booking_data.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    if "room" in changes:
        changes["room"] = changes["room"].value

    booking_date = changes.get("booking_date", booking.booking_date)
    room = changes.get("room", booking.room)
    start_time = changes.get("start_time", booking.start_time)
    end_time = changes.get("end_time", booking.end_time)
    if start_time >= end_time:
        raise HTTPException(status_code=422, detail="end_time must be after start_time")

    existing = await bookings_on(session, booking_date, room)
    ensure_no_conflict(booking_date, room, start_time, end_time, existing, exclude_id=booking.id)

    for field, value in changes.items():
        setattr(booking, field, value)
    session.add(booking)
    await session.commit()
    await session.refresh(booking)
    logger.info("Booking %s updated by %s: %s", booking.id, admin.username, sorted(changes))
    return booking


@app.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: str,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    booking = await get_booking_or_404(session, booking_id)
    await session.delete(booking)
    await session.commit()
    logger.info("Booking %s deleted by %s", booking_id, admin.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/bookings", response_model=BulkDeleteResult)
async def bulk_delete_bookings(
    admin: User = Depends(require_admin),
    period: Period = Depends(period_selector),
    session: AsyncSession = Depends(get_session),
):
    statement = delete(Booking).where(
        Booking.booking_date >= period.start,
        Booking.booking_date <= period.end,
    )
    result = await session.execute(statement)
    await session.commit()
    logger.info(
        "Bulk delete by %s removed %s bookings between %s and %s",
        admin.username, result.rowcount, period.start, period.end,
    )
    return BulkDeleteResult(start=period.start, end=period.end, deleted=result.rowcount)


@app.get("/bookings/export")
async def export_bookings(
    admin: User = Depends(require_admin),
    period: Period = Depends(period_selector),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(select(Booking))
    content = bookings_to_csv(result.scalars().all(), period)
    filename = export_filename(period)
    logger.info("Export of %s to %s requested by %s", period.start, period.end, admin.username)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
