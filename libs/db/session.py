from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from libs.db.config import AsyncSessionLocal


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a block of work as one unit: commit on success, roll back on error.

    Joins the transaction the session may already have autobegun (e.g. for the
    token lookup done by the auth dependency), so every write issued inside the
    block commits together or not at all.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
