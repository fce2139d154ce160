from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base

from instant_transfer.config import DATABASE_URL, SQL_ECHO

# Async engine
engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO, future=True)

# Async session factory
AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

Base = declarative_base()
