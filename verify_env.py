import asyncio
import os

from dotenv import load_dotenv
from sqlalchemy import inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from src.core.database import resolve_async_database_url

load_dotenv()

DB_LABELS = {
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "sqlite": "SQLite",
}

HEALTH_QUERIES = {
    "postgresql": "SELECT version();",
    "mysql": "SELECT VERSION();",
    "sqlite": "SELECT sqlite_version();",
}

REQUIRED_TABLES = ("users", "appointments")


async def verify_database() -> bool:
    print("-" * 30)
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        print("ERROR: DATABASE_URL is not set")
        return False

    try:
        async_url = resolve_async_database_url(db_url)
        url = make_url(async_url)
    except Exception as exc:  # noqa: BLE001 - surface clear setup errors
        print(f"ERROR: unsupported database configuration: {exc}")
        return False

    backend = url.get_backend_name()
    label = DB_LABELS.get(backend, backend)
    print(f"Checking {label} connection...")
    print(f"DSN: {url.render_as_string(hide_password=True)}")

    query = HEALTH_QUERIES.get(backend, "SELECT 1")

    engine = create_async_engine(async_url, echo=False)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text(query))
            print(f"OK: {label} answered {result.scalar()}")
            existing = await conn.run_sync(
                lambda sync_conn: set(inspect(sync_conn).get_table_names())
            )
        missing = [name for name in REQUIRED_TABLES if name not in existing]
        if missing:
            print(f"WARNING: missing tables {', '.join(missing)}; run `alembic upgrade head`")
            return False
        return True
    except Exception as e:  # noqa: BLE001 - surface connection failure
        print(f"ERROR: {label} connection failed: {e}")
        return False
    finally:
        await engine.dispose()


async def verify_settings() -> bool:
    print("-" * 30)
    if not os.getenv("JWT_SECRET"):
        print("ERROR: JWT_SECRET is not set")
        return False
    print("OK: JWT_SECRET is set")
    return True


async def main():
    print("Verifying environment configuration...")

    db_ok = await verify_database()
    settings_ok = await verify_settings()

    print("-" * 30)
    if db_ok and settings_ok:
        print("All checks passed.")
    else:
        print("Some checks failed; review your .env file and database.")


if __name__ == "__main__":
    asyncio.run(main())
