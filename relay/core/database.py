from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from relay.config import DatabaseSettings, get_database_settings


class Base(DeclarativeBase):
  pass


engine = None
SessionLocal = None


def to_sqlalchemy_url(dsn: str | None) -> str | None:
  """Rewrite a plain Postgres DSN so SQLAlchemy uses the asyncpg driver."""
  if dsn and dsn.startswith("postgres://"):
    dsn = dsn.replace("postgres://", "postgresql://", 1)
  if dsn and dsn.startswith("postgresql://"):
    dsn = dsn.replace("postgresql://", "postgresql+asyncpg://", 1)

  return dsn


def to_asyncpg_dsn(dsn: str) -> str:
  """Strip a SQLAlchemy driver suffix so asyncpg.connect accepts the DSN."""
  return dsn.replace("postgresql+asyncpg://", "postgresql://", 1)


def build_engine(settings: DatabaseSettings) -> AsyncEngine:
  """Create an async engine for explicit wiring (worker processes, scripts)."""
  database_url = to_sqlalchemy_url(settings.pg_dsn)
  if not database_url:
    raise RuntimeError("Database connection is not configured (RELAY_PG_DSN is missing).")

  return create_async_engine(database_url, echo=settings.debug, pool_pre_ping=True, connect_args={"timeout": settings.pg_connect_timeout})


def build_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
  return async_sessionmaker(bind=db_engine, expire_on_commit=False, class_=AsyncSession)


def get_db_engine():  # type: ignore
  global engine
  settings = get_database_settings()
  if engine is None and settings.pg_dsn:
    engine = build_engine(settings)
  return engine


def get_session_factory():  # type: ignore
  global SessionLocal
  if SessionLocal is None:
    db_engine = get_db_engine()
    if db_engine:
      SessionLocal = build_session_factory(db_engine)
  return SessionLocal


async def get_db() -> AsyncGenerator[AsyncSession]:
  """Dependency to get a database session."""
  session_factory = get_session_factory()
  if session_factory is None:
    raise RuntimeError("Database connection is not configured (RELAY_PG_DSN is missing).")

  async with session_factory() as session:
    try:
      yield session
    finally:
      await session.close()
