"""
Rate limiting for skidstall
Throttles queries against the AUR RPC endpoint
"""

import time
import threading
from collections import deque
from typing import Callable, Any
from functools import wraps


class RateLimiter:
    """
    Sliding-window rate limiter for API calls

    Tracks request timestamps within the window and admits a request only
    while fewer than max_requests fall inside it.
    """

    def __init__(self, max_requests: int, time_window: float):
        """
        Initialize rate limiter

        Args:
            max_requests: Maximum number of requests allowed in time window
            time_window: Time window in seconds
        """
        self.max_requests = max_requests
        self.time_window = time_window
        self._requests = deque()
        self._lock = threading.Lock()

    def is_allowed(self) -> bool:
        """
        Check if request is allowed, consuming a slot if so

        Returns:
            True if request is allowed, False otherwise
        """
        with self._lock:
            now = time.time()
            cutoff = now - self.time_window

            # Remove expired requests
            while self._requests and self._requests[0] < cutoff:
                self._requests.popleft()

            if len(self._requests) < self.max_requests:
                self._requests.append(now)
                return True

            return False

    def wait_if_needed(self) -> float:
        """
        Block until a request is allowed

        Returns:
            Time waited in seconds
        """
        start = time.time()

        while not self.is_allowed():
            time.sleep(min(0.1, max(0.01, self.get_wait_time())))

        return time.time() - start

    def get_wait_time(self) -> float:
        """
        Get estimated wait time until next request is allowed

        Returns:
            Wait time in seconds, or 0 if request is immediately allowed
        """
        with self._lock:
            if len(self._requests) < self.max_requests:
                return 0.0

            now = time.time()
            oldest = self._requests[0]
            wait = (oldest + self.time_window) - now

            return max(0.0, wait)

    def reset(self):
        """Reset rate limiter (clear all tracked requests)"""
        with self._lock:
            self._requests.clear()


# Global rate limiter instances
_api_rate_limiters = {
    'aur': RateLimiter(max_requests=30, time_window=60),       # AUR RPC info/search
    'default': RateLimiter(max_requests=100, time_window=60),
}


def configure_limiter(limiter_key: str, max_requests: int, time_window: float) -> RateLimiter:
    """Replace the limiter registered under limiter_key"""
    limiter = RateLimiter(max_requests=max_requests, time_window=time_window)
    _api_rate_limiters[limiter_key] = limiter
    return limiter


def get_limiter(limiter_key: str) -> RateLimiter:
    return _api_rate_limiters.get(limiter_key, _api_rate_limiters['default'])


def rate_limit(limiter_key: str = 'default'):
    """
    Decorator for rate-limiting functions

    Blocks until the limiter registered under limiter_key admits the call.

    Example:
        @rate_limit('aur')
        def query_aur():
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            wait_time = get_limiter(limiter_key).wait_if_needed()
            if wait_time > 0:
                from skidstall.logger import get_logger
                get_logger().log_debug(f"Rate limit: waited {wait_time:.2f}s for {limiter_key}")

            return func(*args, **kwargs)

        return wrapper
    return decorator
