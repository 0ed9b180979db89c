"""User registration and credential checks."""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ConflictError, UnauthenticatedError
from src.core.security import hash_password, verify_password
from src.modules.users.models import User
from src.modules.users.schemas import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, payload: UserCreate) -> User:
        email = payload.email.lower()
        existing = await self.db.execute(
            select(User).where(or_(User.username == payload.username, User.email == email))
        )
        if existing.scalars().first() is not None:
            raise ConflictError("Username or email already registered", status_code=409)

        user = User(
            username=payload.username,
            email=email,
            password_hash=hash_password(payload.password),
            role=payload.role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Username or email already registered", status_code=409)
        await self.db.refresh(user)
        logger.info("Registered user %s with role %s", user.id, user.role)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        result = await self.db.execute(select(User).where(User.username == username.strip()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthenticatedError("Invalid username or password")
        if not user.is_active:
            raise UnauthenticatedError("User disabled")
        return user
