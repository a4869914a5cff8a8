from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.engine.url import make_url
from app.config import settings


def is_sqlite_url(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def get_database_url():
    """Parse database URL and convert to asyncpg-compatible format"""
    if is_sqlite_url(settings.DATABASE_URL):
        # Local runs and tests use aiosqlite directly
        return settings.DATABASE_URL

    # Build URL manually to preserve special characters in password
    original_url = make_url(settings.DATABASE_URL)
    port = original_url.port or 5432

    database_url = (
        f"postgresql+asyncpg://{original_url.username}:{original_url.password}"
        f"@{original_url.host}:{port}/{original_url.database}"
    )

    # Add query parameters (excluding sslmode which we handle in connect_args)
    query_params = {}
    if original_url.query:
        for key, value in original_url.query.items():
            if key not in ['sslmode', 'channel_binding']:
                query_params[key] = value

    if query_params:
        query_string = '&'.join([f"{k}={v}" for k, v in query_params.items()])
        database_url += f"?{query_string}"

    return database_url


def get_connect_args():
    """Get connection arguments for the driver (SSL, statement timeout)"""
    if is_sqlite_url(settings.DATABASE_URL):
        return {"timeout": settings.DB_COMMAND_TIMEOUT_SECONDS}

    url = make_url(settings.DATABASE_URL)
    connect_args = {
        # Every statement round-trip is bounded; asyncpg raises TimeoutError past this
        "command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
        "timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
    }

    if url.query and url.query.get('sslmode') == 'require':
        connect_args['ssl'] = 'require'

    return connect_args


def get_engine_kwargs():
    kwargs = {
        "echo": settings.DEBUG,
        "future": True,
        "connect_args": get_connect_args(),
    }
    if not is_sqlite_url(settings.DATABASE_URL):
        kwargs.update(
            pool_pre_ping=True,  # Verify connections before using them
            pool_recycle=3600,  # Recycle connections after 1 hour
            pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        )
    return kwargs


engine = create_async_engine(get_database_url(), **get_engine_kwargs())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

Base = declarative_base()


async def get_db():
    """Get database session (generator for FastAPI dependency injection)"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def close_db():
    """Close database connections"""
    await engine.dispose()
