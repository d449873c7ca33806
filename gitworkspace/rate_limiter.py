"""
Concurrency gates for GitHub API calls and local git operations.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from gitworkspace.exceptions import ConfigurationError

T = TypeVar("T")

DEFAULT_GITHUB_API_CONCURRENCY = 12
DEFAULT_LOCAL_GIT_CONCURRENCY = 14


class RateLimiter:
    """
    Bounds the number of concurrently running coroutines.

    Callers beyond the limit wait for a slot in FIFO order. The scheduled
    call's result or exception is passed through untouched; there is no
    retry here.

    Example:
        ```python
        limiter = RateLimiter(4)
        results = await asyncio.gather(
            *(limiter.schedule(session.fetch) for session in sessions)
        )
        ```
    """

    def __init__(self, max_concurrent: int) -> None:
        if max_concurrent < 1:
            raise ConfigurationError(
                f"max_concurrent must be at least 1, got {max_concurrent}"
            )
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._active = 0

    @property
    def active(self) -> int:
        """Number of operations currently holding a slot."""
        return self._active

    async def schedule(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Run ``fn(*args, **kwargs)`` once a slot is free.

        Args:
            fn: Coroutine function to run
            *args: Positional arguments for fn
            **kwargs: Keyword arguments for fn

        Returns:
            Whatever fn returns; exceptions propagate unchanged
        """
        async with self._semaphore:
            self._active += 1
            try:
                return await fn(*args, **kwargs)
            finally:
                self._active -= 1
