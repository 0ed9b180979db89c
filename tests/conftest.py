import os
from pathlib import Path
import sys

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DEFAULT_TIMEZONE", "America/Argentina/Buenos_Aires")

from src.core.database import Base, get_db  # noqa: E402
from src.core.security import create_access_token, hash_password  # noqa: E402
from src.modules.appointments.models import Appointment  # noqa: E402,F401
from src.modules.users.models import User  # noqa: E402
from src.shared.enums import UserRole  # noqa: E402


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    async with SessionLocal() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Sessions on a file database so each one gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taller.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


async def make_user(session, username: str, role: UserRole = UserRole.CLIENTE) -> User:
    user = User(
        username=username,
        email=f"{username}@taller.com.ar",
        password_hash=hash_password("secreto123"),
        role=role,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_header(user: User) -> dict[str, str]:
    token = create_access_token(str(user.id), user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(db_session):
    from main import create_app

    app = create_app()

    async def override_db():
        yield db_session

    app.dependency_overrides[get_db] = override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def negocio(db_session):
    return await make_user(db_session, "taller", UserRole.NEGOCIO)


@pytest_asyncio.fixture
async def cliente_a(db_session):
    return await make_user(db_session, "ana")


@pytest_asyncio.fixture
async def cliente_b(db_session):
    return await make_user(db_session, "bruno")
