# Local application imports
from civiclink.core.db.create_async_engine import async_engine, build_async_engine
from civiclink.core.db.get_async_session import AsyncSessionLocal

__all__ = [
    "AsyncSessionLocal",
    "async_engine",
    "build_async_engine",
]
