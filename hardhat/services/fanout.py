"""
Bounded, best-effort concurrent execution of independent jobs.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from hardhat.core.config import settings
from hardhat.core.exceptions import APIError
from hardhat.core.logging import logger


T = TypeVar('T')
R = TypeVar('R')


@dataclass
class Outcome(Generic[R]):
    """Result of one job: either a value or the error that ended it."""
    index: int
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        if isinstance(self.error, APIError):
            return self.error.message
        return str(self.error) or type(self.error).__name__


async def run_all(
    items: Sequence[T],
    worker: Callable[[int, T], Awaitable[R]],
    max_concurrency: Optional[int] = None
) -> List[Outcome[R]]:
    """
    Run ``worker(index, item)`` for every item, at most ``max_concurrency`` at a time.

    A failing job never cancels its siblings. Outcomes come back in input
    order regardless of completion order.
    """
    limit = max(1, max_concurrency or settings.MAX_CONCURRENT_INFERENCES)
    semaphore = asyncio.Semaphore(limit)

    async def bounded(index: int, item: T) -> Any:
        async with semaphore:
            return await worker(index, item)

    results = await asyncio.gather(
        *(bounded(index, item) for index, item in enumerate(items)),
        return_exceptions=True
    )

    outcomes: List[Outcome[R]] = []
    for index, result in enumerate(results):
        if isinstance(result, BaseException):
            logger.warning(f"Job {index} failed: {result!r}")
            outcomes.append(Outcome(index=index, error=result))
        else:
            outcomes.append(Outcome(index=index, value=result))
    return outcomes
