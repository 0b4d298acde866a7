from datetime import date
from typing import Iterable, Optional

import pandas as pd

from periods import Period, filter_by_period, format_time

EXPORT_COLUMNS = [
    "Tanggal",
    "Nama Peminjam",
    "Ruangan",
    "Waktu Mulai",
    "Waktu Selesai",
    "Keterangan",
]


def bookings_to_csv(bookings: Iterable, period: Period) -> str:
    """CSV of the bookings inside `period`, ordered by date and start time."""
    selected = sorted(
        filter_by_period(bookings, period),
        key=lambda b: (b.booking_date, b.start_time),
    )
    rows = [
        [
            b.booking_date.isoformat(),
            b.name,
            b.room,
            format_time(b.start_time),
            format_time(b.end_time),
            b.description or "",
        ]
        for b in selected
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS).to_csv(index=False)


def export_filename(period: Period, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"peminjaman-ruangan-{period.label}-{today.isoformat()}.csv"
