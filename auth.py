import logging

import bcrypt

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from models import User, Role

logger = logging.getLogger(__name__)

security = HTTPBasic()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


async def get_user_by_username(session: AsyncSession, username: str):
    result = await session.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def ensure_user(session: AsyncSession, username: str, password: str, role: Role = Role.USER) -> User:
    """Create the user unless one with that username already exists."""
    user = await get_user_by_username(session, username)
    if user:
        return user
    user = User(username=username, password_hash=hash_password(password), role=role.value)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Provisioned %s account %s", role.value, username)
    return user


async def get_current_user(
    credentials: HTTPBasicCredentials = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> User:
    user = await get_user_by_username(session, credentials.username)
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login for %s", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
