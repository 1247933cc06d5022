# roster_dashboard/core/tracking.py
import asyncio
from functools import partial
from typing import Any, Callable, TypeVar
import logging

logger = logging.getLogger(__name__)

R = TypeVar("R")


class RequestTracker:
    """
    Generation counter for one view.

    Each fetch takes a token when it is issued; its result may only be
    applied while that token is still the latest one handed out.
    """

    def __init__(self, name: str):
        self.name = name
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def issue(self) -> int:
        self._generation += 1
        return self._generation

    def invalidate(self):
        """Make every outstanding token stale"""
        self._generation += 1

    def is_current(self, token: int) -> bool:
        if token != self._generation:
            logger.debug(f"Discarding stale {self.name} response (token {token}, current {self._generation})")
            return False
        return True


async def run_blocking(func: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    """Run a blocking client call in a worker thread so the event loop stays responsive"""
    return await asyncio.to_thread(partial(func, *args, **kwargs))
