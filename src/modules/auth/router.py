"""Authentication routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.deps import get_current_user
from src.core.security import create_access_token
from src.modules.auth.schemas import LoginRequest, TokenResponse
from src.modules.users.models import User
from src.modules.users.schemas import UserCreate, UserPublic
from src.modules.users.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)) -> User:
    return await UserService(db).register(payload)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange username and password for a bearer token."""
    user = await UserService(db).authenticate(payload.username, payload.password)
    token = create_access_token(str(user.id), user.role)
    return TokenResponse(token=token, user_info=UserPublic.model_validate(user))


@router.get("/me", response_model=UserPublic)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
