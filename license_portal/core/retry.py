import asyncio
import logging
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_operation(
    operation: Callable[[], T],
    max_retries: int = 3,
    delay_ms: int = 1000,
    label: Optional[str] = None,
) -> T:
    """
    Run ``operation`` up to ``max_retries`` times.

    The wait between attempts starts at ``delay_ms`` and doubles after each
    failure. The last error is re-raised once every attempt has failed.
    ``operation`` may be a plain callable or return an awaitable.
    """
    name = label or getattr(operation, "__name__", "operation")
    delay = delay_ms
    last_error: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            result = operation()
            if asyncio.iscoroutine(result):
                result = await result
            return result
        except Exception as e:
            last_error = e
            logger.warning(f"{name} failed on attempt {attempt}/{max_retries}: {str(e)}")
            if attempt < max_retries:
                await asyncio.sleep(delay / 1000)
                delay *= 2

    assert last_error is not None
    raise last_error
