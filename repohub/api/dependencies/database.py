from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from repohub.config import Settings, get_settings


async def get_db_session(settings: Settings = Depends(get_settings)) -> AsyncSession:
    """Get the database session then close it after the request is complete."""
    engine = create_async_engine(settings.SQLALCHEMY_DATABASE_URL, echo=False)
    AsyncSessionLocal = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )

    try:
        async with AsyncSessionLocal() as db_session:
            yield db_session
    finally:
        await engine.dispose()
