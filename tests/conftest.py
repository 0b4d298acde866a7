import os
import tempfile

# database.py reads DATABASE_URL at import time
_db_dir = tempfile.mkdtemp(prefix="room-reservation-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlmodel import SQLModel

from auth import ensure_user
from database import async_session, engine, init_db
from main import app
from models import Role

ADMIN = ("admin", "admin-pass")
STAFF = ("staff", "staff-pass")


@pytest.fixture
async def client():
    await init_db()
    async with async_session() as session:
        await ensure_user(session, *ADMIN, role=Role.ADMIN)
        await ensure_user(session, *STAFF)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()
