# portal/core/database.py

import ssl
from dotenv import load_dotenv
from typing import AsyncGenerator

from loguru import logger
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from portal.core.config import settings

load_dotenv()

if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set")

IS_POSTGRES = settings.DATABASE_URL.startswith("postgresql")


# ----------------------------------------------------
# Engine
# ----------------------------------------------------
def _postgres_ssl_context() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    if not settings.DB_SSL_VERIFY:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _connect_args() -> dict:
    if not IS_POSTGRES:
        return {}
    # asyncpg behind pgbouncer: no server-side prepared statements
    return {
        "ssl": _postgres_ssl_context(),
        "statement_cache_size": 0,
        "prepared_statement_name_func": None,
    }


def build_engine(url: str) -> AsyncEngine:
    backend = "postgres" if IS_POSTGRES else url.split(":", 1)[0]
    logger.info(f"Database engine: {backend}")
    return create_async_engine(
        url,
        echo=False,
        connect_args=_connect_args(),
        pool_pre_ping=True,
        poolclass=NullPool,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


# ----------------------------------------------------
# Schema
# ----------------------------------------------------
async def init_db():
    # every table module must be imported before create_all
    from portal.models import registry  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db():
    from portal.models import registry  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


async def test_connection():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        logger.debug("DB connection OK")
