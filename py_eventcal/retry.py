"""Bounded retry for store writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .internal import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Retry an async call a fixed number of times with a fixed delay.

    The default matches series materialization: three attempts in total,
    one second between attempts.
    """

    max_attempts: int = 3
    backoff: float = 1.0  # Seconds between attempts
    retry_on: tuple[type[BaseException], ...] = (Exception,)
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, repr=False)

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Call ``func`` until it succeeds or attempts are exhausted.

        Raises:
            PersistenceError: Wrapping the last error once all attempts failed
        """
        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await func(*args, **kwargs)
            except self.retry_on as e:
                last_error = e
                if attempt == self.max_attempts:
                    break
                logger.warning(
                    "Attempt %d/%d failed: %s; retrying in %.1fs",
                    attempt,
                    self.max_attempts,
                    e,
                    self.backoff,
                )
                await self.sleep(self.backoff)

        logger.error("Giving up after %d attempts: %s", self.max_attempts, last_error)
        raise PersistenceError(last_error) from last_error  # type: ignore[arg-type]
