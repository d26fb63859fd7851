import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

logger = logging.getLogger("api")

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False):
    """Create the async engine for the given URL"""
    if database_url.startswith("sqlite"):
        # aiosqlite: a single shared connection keeps in-memory databases alive
        logger.info("✅ Using SQLite database: %s", database_url)
        return create_async_engine(
            database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

    logger.info("✅ Using async DATABASE_URL: %s", database_url.split("://", 1)[0] + "://...")
    # FASTAPI ENGINE: Optimized for web requests
    return create_async_engine(
        database_url,
        pool_size=10,                    # Moderate pool for bot management requests
        max_overflow=20,                 # Allow overflow for occasional spikes
        pool_timeout=30,                 # Timeout for getting connection
        pool_recycle=3600,               # Recycle connections after 1 hour
        pool_pre_ping=True,              # Validate connections before use
        pool_reset_on_return='commit',   # Reset connection state on return
        echo=echo,
    )


def build_session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request):
    async with request.app.state.session_factory() as session:
        yield session
