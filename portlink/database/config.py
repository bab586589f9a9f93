from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.orm import declarative_base

from portlink.config.settings import settings

# Stable constraint names so Alembic autogenerate diffs stay clean
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Base class for all ORM models
Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))

# Async engine for PostgreSQL (asyncpg) with pooled connections
engine = create_async_engine(
    settings.async_database_url,
    connect_args=settings.database_connect_args,  # sslmode from DATABASE_URL
    echo=False,              # NEVER enable in production
    pool_size=10,            # base connection pool size
    max_overflow=20,         # extra connections under load
    pool_timeout=30,         # seconds to wait for a connection
    pool_recycle=1800,       # recycle connections every 30 min
    pool_pre_ping=True,      # validate connections before use
)

# Async session factory shared by requests and Celery tasks
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def ping(session: AsyncSession) -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    await session.execute(text("SELECT 1"))


# Dependency for FastAPI routes
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
