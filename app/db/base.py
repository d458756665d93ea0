"""
Database base configuration and async session management
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.core.config import settings

# Base class for models (must be defined first)
Base = declarative_base()

# Engine and session factory - only created when first needed so that Alembic
# can import Base without a database connection
_engine = None
_AsyncSessionLocal = None


def get_database_url(url=None):
    """Get database URL, converting to async driver format if needed"""
    database_url = url or settings.DATABASE_URL or "postgresql+asyncpg://localhost/rooftracker"
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("sqlite:///"):
        database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


def get_engine():
    """Get or create the async database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            get_database_url(),
            pool_pre_ping=True,
            echo=settings.DEBUG,
        )
    return _engine


def get_session_factory():
    """Get or create the async session factory (lazy initialization)"""
    global _AsyncSessionLocal
    if _AsyncSessionLocal is None:
        _AsyncSessionLocal = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _AsyncSessionLocal


async def get_db():
    """
    Async dependency to get database session.
    Use this in FastAPI route dependencies.

    Example:
        @router.get("/jobs")
        async def list_jobs(db: AsyncSession = Depends(get_db)):
            ...
    """
    if not settings.DATABASE_URL:
        raise ValueError("DATABASE_URL not configured")

    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
