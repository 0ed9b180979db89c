"""FastAPI dependencies for authentication/authorization.

The caller's identity is resolved once per request into an immutable
``RequestContext`` that handlers receive and pass down.
"""

from dataclasses import dataclass

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.exceptions import ForbiddenError, UnauthenticatedError
from src.core.security import TokenDecodeError, decode_access_token
from src.modules.users.models import User
from src.shared.enums import UserRole

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True, slots=True)
class RequestContext:
    user_id: int
    role: UserRole


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
) -> User | None:
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except TokenDecodeError as exc:
        raise UnauthenticatedError("Invalid token") from exc

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise UnauthenticatedError("Invalid token payload") from exc

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise UnauthenticatedError("User disabled")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await _resolve_user(credentials, db)
    if user is None:
        raise UnauthenticatedError("Missing authentication")
    return user


async def get_request_context(current_user: User = Depends(get_current_user)) -> RequestContext:
    # Role comes from the stored user, not from the token claims.
    return RequestContext(user_id=current_user.id, role=current_user.role)


def require_role(*roles: UserRole):
    async def dependency(context: RequestContext = Depends(get_request_context)) -> RequestContext:
        if context.role not in roles:
            raise ForbiddenError("Forbidden")
        return context

    return dependency


require_authenticated = get_request_context
require_negocio = require_role(UserRole.NEGOCIO)
