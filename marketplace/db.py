# marketplace/db.py
import os
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse, ParseResult
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase
from collections.abc import AsyncGenerator

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./marketplace.db")

# Ensure async driver
if DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)

def strip_query_params(url: str, drop_keys=("sslmode", "channel_binding")) -> str:
    p = urlparse(url)
    if not p.query:
        # urlunparse would drop the empty netloc of sqlite:///path URLs
        return url
    qs = parse_qs(p.query, keep_blank_values=True)
    for k in list(qs.keys()):
        if k in drop_keys:
            qs.pop(k)
    new_query = urlencode({k: v[0] for k, v in qs.items()})
    newp = ParseResult(
        scheme=p.scheme, netloc=p.netloc, path=p.path,
        params=p.params, query=new_query, fragment=p.fragment
    )
    return urlunparse(newp)

CLEAN_DATABASE_URL = strip_query_params(DATABASE_URL)


def make_engine(url: str) -> AsyncEngine:
    """
    Build an async engine for `url`.
    SQLite connections get case-sensitive LIKE and enforced foreign keys.
    """
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=False, future=True)

        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA case_sensitive_like = ON")
            cur.execute("PRAGMA foreign_keys = ON")
            cur.close()

        return engine

    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_size=5,
        max_overflow=10,
    )


def make_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


engine = make_engine(CLEAN_DATABASE_URL)
AsyncSessionLocal = make_sessionmaker(engine)

class Base(DeclarativeBase):
    pass

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
