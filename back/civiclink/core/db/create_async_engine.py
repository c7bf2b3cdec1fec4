# Third-party imports
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

# Local application imports
from civiclink.settings import settings


def build_async_engine(database_uri: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; in-memory SQLite shares one connection so the schema survives."""
    if database_uri.startswith("sqlite") and ":memory:" in database_uri:
        return create_async_engine(
            database_uri,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_uri, echo=echo, pool_pre_ping=True)


# Asynchronous Engine
async_engine = build_async_engine(settings.SQLALCHEMY_ASYNC_DATABASE_URI, echo=settings.DATABASE_ECHO)
