from logging.config import fileConfig
import os
import sys
from pathlib import Path
from urllib.parse import quote_plus

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine

# project root on sys.path so the application metadata imports as src.notecollab
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# existing environment variables win over .env
load_dotenv(dotenv_path=str(project_root / ".env"), override=False)

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

# registers every table on the metadata
from src.notecollab.core.models import BaseModel  # noqa: E402

target_metadata = BaseModel.metadata


def _build_postgresql_url() -> str | None:
    """Full URL from config or env, else assembled from DB_* variables."""
    cfg = context.config.get_section(context.config.config_ini_section) or {}
    url = cfg.get("sqlalchemy.url") or os.environ.get("DATABASE_URL")
    if url:
        if not url.startswith("postgresql"):
            raise ValueError(f"Only PostgreSQL is supported. Got: {url}")
        return url

    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    db = os.environ.get("DB_NAME", "notecollab")
    user = os.environ.get("DB_USER", "notecollab")
    pwd = os.environ.get("DB_PASSWORD") or os.environ.get("POSTGRES_PASSWORD")
    if not pwd:
        return None

    return f"postgresql+asyncpg://{quote_plus(user)}:{quote_plus(pwd)}@{host}:{port}/{db}"


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a bound connection (sync)."""
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(url: str) -> None:
    """Run migrations for an async engine."""
    connectable: AsyncEngine = create_async_engine(url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


def run_migrations_online() -> None:
    """Entry point used by alembic - PostgreSQL only."""
    url = _build_postgresql_url()
    if not url:
        raise RuntimeError("No PostgreSQL database URL available for Alembic (set DATABASE_URL or DB_* env vars)")

    if url.startswith("postgresql+asyncpg"):
        import asyncio
        asyncio.run(run_async_migrations(url))
    else:
        # sync drivers (psycopg2/psycopg)
        connectable = engine_from_config(
            {"sqlalchemy.url": url},
            prefix="sqlalchemy.",
            poolclass=pool.NullPool,
        )
        with connectable.connect() as connection:
            do_run_migrations(connection)


def run_migrations_offline() -> None:
    url = _build_postgresql_url()
    if not url:
        raise RuntimeError("No PostgreSQL database URL available for Alembic offline mode")

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
