from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from fastapi import Request

from messagely.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)

def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def get_db(request: Request):
    async with request.app.state.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.close()

async def create_tables(engine: AsyncEngine):
    from messagely.models.base import Base
    from messagely.models import user, message

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
