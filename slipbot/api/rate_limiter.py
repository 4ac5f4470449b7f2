"""Rate limiting and retry for exchange API calls."""

import logging
import time
from collections import deque
from functools import wraps
from threading import Lock
from typing import Callable, Tuple, Type, TypeVar

from slipbot.api.exceptions import RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimiter:
    """
    Sliding-window rate limiter for API calls.

    Each exchange client owns one, so limits are tracked per venue.
    """

    def __init__(
        self,
        max_requests: int = 10,
        time_window: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests allowed in the time window
            time_window: Time window in seconds
            clock: Monotonic clock, injectable for tests
            sleep: Delay function, injectable for tests
        """
        self.max_requests = max_requests
        self.time_window = time_window
        self._clock = clock
        self._sleep = sleep
        self.requests: deque[float] = deque()
        self.lock = Lock()

    def _evict(self, now: float) -> None:
        while self.requests and self.requests[0] <= now - self.time_window:
            self.requests.popleft()

    def acquire(self) -> None:
        """
        Acquire permission to make a request.

        Blocks if rate limit would be exceeded.
        """
        with self.lock:
            now = self._clock()
            self._evict(now)

            if len(self.requests) >= self.max_requests:
                sleep_time = (self.requests[0] + self.time_window) - now
                if sleep_time > 0:
                    logger.debug(f"Rate limit reached, sleeping {sleep_time:.3f}s")
                    self._sleep(sleep_time)
                    now = self._clock()
                    self._evict(now)

            self.requests.append(now)


def rate_limited(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator for client methods; acquires the client's own limiter.

    Usage:
        @rate_limited
        def fetch_market_depth(self, currency):
            ...
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs) -> T:
        self.rate_limiter.acquire()
        return func(self, *args, **kwargs)

    return wrapper


def with_retry(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    retry_on: Tuple[Type[Exception], ...] = (RateLimitError,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator factory for exponential backoff retry.

    Only use retry_on types that are safe to repeat for the wrapped call:
    order placement must not retry on transport errors.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        retry_on: Exception types that trigger a retry
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            last_error = None
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    last_error = e
                    if attempt >= max_retries:
                        logger.error(f"{func.__name__}: max retries exceeded: {e}")
                        raise
                    # A server-sent retry_after is still capped by max_delay
                    delay = min(
                        getattr(e, "retry_after", None) or base_delay * (2**attempt),
                        max_delay,
                    )
                    logger.warning(
                        f"{func.__name__} failed ({e}), retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
            raise last_error  # Should never reach here

        return wrapper

    return decorator
