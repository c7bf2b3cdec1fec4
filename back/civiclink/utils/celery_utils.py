# Standard library imports
import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


def run_async_in_celery(coro: Awaitable[T]) -> T:
    """
    Run a coroutine to completion from a Celery worker.

    Every call gets its own event loop, so async resources such as database
    engines and HTTP clients must be created inside the coroutine and closed
    before it returns.

    Raises:
        Any exception raised by the coroutine
    """
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        asyncio.set_event_loop(None)
        loop.close()
