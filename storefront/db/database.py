# storefront/db/database.py
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from storefront.config import DATABASE_URL, SQL_ECHO

# Async engine
engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)

# Async session factory
SessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()

# Session generator
async def get_db():
    async with SessionLocal() as session:
        yield session
