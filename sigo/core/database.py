"""
Async engine & per-request session.

The engine is the process-wide store connection handle.  Sessions are
short-lived: one per request, opened by `get_db` and closed when the
response is sent.  Commits are issued by the store gateway after each
write, not here.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sigo.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a session for the duration of the request."""
    async with async_session_factory() as session:
        yield session
