from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from datacleaner.core.config import settings

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_async_engine(settings.database_url, future=True, echo=False, connect_args=connect_args)
# Cleaners keep loaded user records across commits, so attributes must not expire.
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)
