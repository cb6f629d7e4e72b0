"""Turns "near the end of the list" signals into next-page requests."""

from __future__ import annotations

import asyncio
import logging

from .aggregator import DiscoveryAggregator

logger = logging.getLogger(__name__)


class ScrollTriggerCoordinator:
    """Edge-triggered bridge between viewport proximity and the aggregator.

    A "near end" edge is only consumed when it actually schedules a fetch. A
    signal that arrives while the cursor is loading or has nothing more to
    load leaves the edge unconsumed, so a later signal can still fire once
    the cursor reaches HAS_MORE. While a scheduled fetch is outstanding every
    further signal is ignored; once it settles the coordinator re-arms.
    """

    def __init__(self, aggregator: DiscoveryAggregator) -> None:
        self._aggregator = aggregator
        self._near_end = False
        self._pending: asyncio.Task[bool] | None = None

    @property
    def pending(self) -> asyncio.Task[bool] | None:
        if self._pending is not None and self._pending.done():
            return None
        return self._pending

    def signal(self, near_end: bool) -> asyncio.Task[bool] | None:
        """Handle a proximity update; return the fetch task when one was scheduled."""

        if not near_end:
            self._near_end = False
            return None
        if self._near_end or self.pending is not None:
            return None
        if not self._aggregator.can_load_more:
            return None

        self._near_end = True
        task = asyncio.get_running_loop().create_task(self._aggregator.load_more())
        task.add_done_callback(self._on_settled)
        self._pending = task
        return task

    def reset(self) -> None:
        """Forget the current edge and any pending task, e.g. after a filter change."""

        self._near_end = False
        self._pending = None

    def _on_settled(self, task: asyncio.Task[bool]) -> None:
        if task is self._pending:
            self._pending = None
            self._near_end = False
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Next-page fetch raised unexpectedly", exc_info=exc)
