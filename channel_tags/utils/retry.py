"""
Retry decorator for channel registration API calls.
Implements exponential backoff with jitter.

Only transient failures are retried: rate limiting, timeouts, dropped
connections and server-side (5xx) errors. A rejected request (4xx) will
fail the same way on every attempt.
"""

import functools
import random
import time
from typing import Callable, Optional, Type, Tuple

from channel_tags.utils.logging_config import get_logger
from channel_tags.utils.exceptions import (
    RegistrationAPIError,
    RateLimitExceededError,
    NetworkTimeoutError,
)

logger = get_logger("retry")


RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    RegistrationAPIError,
    NetworkTimeoutError,
    ConnectionError,
    TimeoutError,
)


def is_transient(error: Exception) -> bool:
    """
    Whether a registration failure may succeed if sent again.

    RegistrationAPIError without a status code comes from the transport
    layer (connection refused, reset) and counts as transient.
    """
    if isinstance(error, RateLimitExceededError):
        return True
    if isinstance(error, RegistrationAPIError):
        return error.status_code is None or error.status_code >= 500
    return True


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = RETRYABLE_EXCEPTIONS,
    retry_if: Callable[[Exception], bool] = is_transient,
    sleep: Optional[Callable[[float], None]] = None,
):
    """
    Decorator for retrying failed API calls with exponential backoff.
    
    Args:
        max_attempts: Maximum number of attempts (at least one is always made)
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential backoff calculation
        retryable_exceptions: Tuple of exception types to retry on
        retry_if: Further filter on a caught exception; False re-raises it
        sleep: Function used to wait between attempts (default time.sleep)
    
    Returns:
        Decorated function with retry logic
    
    Example:
        @retry(max_attempts=3, base_delay=1.0)
        def update_registration(tags):
            # API call here
            pass
    """
    attempts = max(1, max_attempts)

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if not retry_if(e):
                        raise
                    if attempt == attempts:
                        logger.error(
                            f"Max retries ({attempts}) exceeded for {func.__name__}: {e}"
                        )
                        raise
                    
                    delay = min(
                        base_delay * (exponential_base ** (attempt - 1)),
                        max_delay
                    )
                    # Jitter (±25%)
                    jitter = delay * 0.25 * (random.random() * 2 - 1)
                    delay = max(0, delay + jitter)
                    
                    logger.warning(
                        f"Retry {attempt}/{attempts} for {func.__name__} "
                        f"after {delay:.2f}s delay: {e}"
                    )
                    
                    (sleep or time.sleep)(delay)
        
        return wrapper
    return decorator
