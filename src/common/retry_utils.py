"""Retry utility with exponential backoff for handling transient provider errors."""

import asyncio
import functools
import logging
import random
from typing import Any, Callable, Optional, TypeVar

from common.exceptions import TransientProviderError

logger = logging.getLogger(__name__)

# Type variable for generic function return type
T = TypeVar("T")


def calculate_exponential_backoff_delay(
    initial_delay: float,
    attempt: int,
    exponential_base: int = 2,
    max_delay: Optional[float] = None,
    jitter: float = 0.0,
) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        initial_delay: Initial delay in seconds
        attempt: Current attempt number (0-indexed)
        exponential_base: Base for exponential calculation (e.g., 2)
        max_delay: Optional cap in seconds
        jitter: Extra random delay as a fraction of the delay (0 disables it)

    Returns:
        Delay in seconds

    Example:
        >>> calculate_exponential_backoff_delay(1.0, 2)
        4.0
    """
    # Calculate exponential delay: initial_delay * base^attempt
    delay = initial_delay * (exponential_base**attempt)

    if max_delay is not None:
        delay = min(delay, max_delay)

    if jitter > 0:
        delay += random.uniform(0, delay * jitter)

    return delay


def is_transient_error(error: Exception) -> bool:
    """
    Determine if an error is transient (should retry) or permanent.

    Checks both the error itself and its __cause__ chain.

    Args:
        error: Exception to check

    Returns:
        True if error is transient and should be retried, False otherwise
    """
    if isinstance(error, TransientProviderError):
        return True

    # Network-related errors - transient
    if isinstance(error, (ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return True

    # OSError subtypes that are transient (connection refused, unreachable)
    if isinstance(error, OSError):
        return True

    if error.__cause__ is not None and isinstance(error.__cause__, Exception):
        return is_transient_error(error.__cause__)

    # Default: treat unknown errors as permanent to avoid infinite retries
    return False


def retry_with_exponential_backoff(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    exponential_base: int = 2,
    max_delay: Optional[float] = None,
    jitter: float = 0.0,
    is_retryable: Callable[[Exception], bool] = is_transient_error,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that adds retry logic with exponential backoff to async functions.

    The delay before attempt n+1 is initial_delay * exponential_base**(n-1),
    so with the defaults the waits are 1s, 2s, 4s...

    Args:
        max_attempts: Total number of attempts, including the first one
        initial_delay: Delay in seconds before the second attempt
        exponential_base: Base for exponential backoff calculation
        max_delay: Optional cap in seconds between attempts
        jitter: Random extra delay as a fraction of each delay
        is_retryable: Predicate deciding whether an error is worth retrying

    Returns:
        Decorated function with retry logic

    Example:
        @retry_with_exponential_backoff(max_attempts=3, initial_delay=1)
        async def call_provider():
            return await api_call()
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)

                except Exception as e:
                    if not is_retryable(e):
                        logger.error(
                            f"❌ Permanent error in {func.__name__}: {e}. Not retrying."
                        )
                        raise

                    if attempt >= max_attempts:
                        logger.error(
                            f"❌ Max attempts ({max_attempts}) exhausted for "
                            f"{func.__name__}. Last error: {e}"
                        )
                        raise

                    delay = calculate_exponential_backoff_delay(
                        initial_delay=initial_delay,
                        attempt=attempt - 1,
                        exponential_base=exponential_base,
                        max_delay=max_delay,
                        jitter=jitter,
                    )

                    logger.warning(
                        f"⚠️  Transient error in {func.__name__}: {e}. "
                        f"Attempt {attempt}/{max_attempts} failed, retrying in {delay:.2f}s..."
                    )

                    await asyncio.sleep(delay)

        return wrapper

    return decorator
