from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


def _sqlite_url(path: str) -> str:
    # ":memory:" keeps everything in a single shared connection
    return f"sqlite+aiosqlite:///{path}"


def create_engine_for(path: str) -> AsyncEngine:
    if path == ":memory:":
        return create_async_engine(
            _sqlite_url(path),
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(_sqlite_url(path), echo=False)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


class Base(DeclarativeBase):
    pass
