from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from instant_transfer.db.session import AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request. Routes that write open their own
    ``async with db.begin()``; anything left uncommitted is rolled back on close.
    """
    async with AsyncSessionLocal() as session:
        yield session
