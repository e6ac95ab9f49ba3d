"""Cooperative scheduling primitives.

This module expresses yield points and worker offload as one small
interface so queue and ingest logic never call event-loop APIs directly.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol, TypeVar

_T = TypeVar("_T")


class Scheduler(Protocol):
    """Scheduling operations used by long-running cooperative work."""

    async def yield_now(self) -> None:
        """Give other ready callbacks a chance to run."""

    async def pause(self, seconds: float) -> None:
        """Yield for at least ``seconds`` before resuming."""

    async def run_blocking(self, func: Callable[..., _T], *args: Any) -> _T:
        """Run a blocking callable off the caller's execution context."""


class AsyncioScheduler:
    """Event-loop scheduler backed by ``asyncio`` and a worker thread pool.

    Args:
        offload: When false, blocking callables run inline on the loop.
            Useful for in-memory backends where a thread hop buys nothing.
    """

    def __init__(self, offload: bool = True) -> None:
        self._offload = offload

    async def yield_now(self) -> None:
        await asyncio.sleep(0)

    async def pause(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))

    async def run_blocking(self, func: Callable[..., _T], *args: Any) -> _T:
        if not self._offload:
            return func(*args)
        return await asyncio.to_thread(func, *args)
