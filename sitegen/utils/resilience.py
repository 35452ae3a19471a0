# sitegen/utils/resilience.py
# Bounded retry and timeouts for calls to Bedrock and S3

import asyncio
import logging
from functools import wraps
from typing import Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
AsyncFn = Callable[..., Awaitable[T]]


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number `attempt` (0-based): base * 2^attempt, capped."""
    return min(base_delay * (2 ** attempt), max_delay)


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[AsyncFn], AsyncFn]:
    """Retry an async call up to `max_retries` extra times on `exceptions`.

    Other exceptions propagate immediately. The last failure is re-raised.
    """
    def decorator(func: AsyncFn) -> AsyncFn:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error("%s failed after %d attempts: %s", func.__name__, attempt + 1, e)
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay)
                    logger.warning(
                        "%s attempt %d failed (%s); retrying in %.2fs", func.__name__, attempt + 1, e, delay
                    )
                    attempt += 1
                    await asyncio.sleep(delay)

        return wrapper
    return decorator


def with_timeout(seconds: float) -> Callable[[AsyncFn], AsyncFn]:
    """Abandon an async call after `seconds`, raising asyncio.TimeoutError."""
    def decorator(func: AsyncFn) -> AsyncFn:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=seconds)
            except asyncio.TimeoutError:
                logger.error("%s exceeded its %.1fs time limit", func.__name__, seconds)
                raise

        return wrapper
    return decorator
