"""
Activity Hub
============

In-process push channel for new interaction events.

- publish(event) queues the event and (re)schedules a one-shot refresh job
  on the AsyncIOScheduler, delayed so the insert is committed first.
- Events published before the job fires coalesce into a single refresh.
- Subscribers receive the batch of queued events.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler

log = logging.getLogger("telco.realtime")

REFRESH_JOB_ID = "activity_refresh"

Subscriber = Callable[[List[Dict[str, Any]]], Union[None, Awaitable[None]]]


class ActivityHub:
    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None, delay_seconds: float = 1.0) -> None:
        self.scheduler = scheduler
        self.delay_seconds = delay_seconds
        self._subscribers: List[Subscriber] = []
        self._pending: List[Dict[str, Any]] = []
        self.version = 0
        self.last_refresh_at: Optional[datetime] = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def pending(self) -> List[Dict[str, Any]]:
        return list(self._pending)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: Dict[str, Any]) -> None:
        self._pending.append(dict(event))

        if self.scheduler is None or not self.scheduler.running:
            return

        run_at = datetime.now(timezone.utc) + timedelta(seconds=self.delay_seconds)
        self.scheduler.add_job(
            self.flush,
            "date",
            run_date=run_at,
            id=REFRESH_JOB_ID,
            replace_existing=True,
        )

    async def flush(self) -> int:
        """
        Deliver queued events to every subscriber. Returns the batch size.
        A failing subscriber is logged and does not stop the others.
        """
        if not self._pending:
            return 0

        batch, self._pending = self._pending, []
        self.version += 1
        self.last_refresh_at = datetime.now(timezone.utc)

        for callback in list(self._subscribers):
            try:
                result = callback(batch)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                log.exception("Activity subscriber failed")

        log.info("Activity refresh delivered events=%s subscribers=%s", len(batch), len(self._subscribers))
        return len(batch)


class LiveQueue:
    """
    Per-connection adapter: turns hub batches into an asyncio.Queue a
    websocket handler can await on.
    """

    def __init__(self, hub: ActivityHub, maxsize: int = 100) -> None:
        self.queue: "asyncio.Queue[List[Dict[str, Any]]]" = asyncio.Queue(maxsize=maxsize)
        self._unsubscribe = hub.subscribe(self._push)

    def _push(self, batch: List[Dict[str, Any]]) -> None:
        if self.queue.full():
            self.queue.get_nowait()
        self.queue.put_nowait(batch)

    async def get(self) -> List[Dict[str, Any]]:
        return await self.queue.get()

    def close(self) -> None:
        self._unsubscribe()
