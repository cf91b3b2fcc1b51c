"""
In-process broadcast of now-playing changes.

Every subscriber owns a queue, so publishing never waits on a slow or absent
consumer. Single event loop, single process.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from loguru import logger

from .models import StationChange

Listener = Callable[[StationChange], Union[None, Awaitable[None]]]

# Marks the end of a subscription's stream
_CLOSED = object()


class Subscription:
    """A subscriber's view of the change feed.

    Iterate with ``async for change in subscription``; iteration ends when the
    subscription or the notifier is closed.
    """

    def __init__(self, notifier: "StationChangeNotifier", max_queue_size: int = 0):
        self._notifier = notifier
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self.closed = False
        self.dropped = 0

    def _offer(self, item: Any) -> None:
        if self._queue.full():
            # Bounded subscribers lose their oldest event rather than block
            self._queue.get_nowait()
            self.dropped += 1
            logger.warning(f"Subscriber lagging, dropped {self.dropped} change event(s)")
        self._queue.put_nowait(item)

    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> Optional[StationChange]:
        """Wait for the next change; None once the subscription is closed."""
        if self.closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._notifier._discard(self)
        self._offer(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> StationChange:
        change = await self.get()
        if change is None:
            raise StopAsyncIteration
        return change


class StationChangeNotifier:
    """Fan-out of StationChange events to any number of subscribers."""

    def __init__(self, max_queue_size: int = 0) -> None:
        self._max_queue_size = max_queue_size
        self._subscriptions: list[Subscription] = []
        self._listener_tasks: set[asyncio.Task] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self) -> Subscription:
        """Register a queue-backed subscriber."""
        subscription = Subscription(self, self._max_queue_size)
        self._subscriptions.append(subscription)
        return subscription

    def add_listener(self, callback: Listener) -> Subscription:
        """Deliver every change to callback from a dedicated task.

        Must be called from a running event loop. The callback may be a plain
        function or a coroutine function; its errors are logged and delivery
        continues.
        """
        subscription = self.subscribe()
        task = asyncio.create_task(
            self._dispatch(subscription, callback),
            name=f"station-listener-{getattr(callback, '__name__', 'callback')}",
        )
        self._listener_tasks.add(task)
        task.add_done_callback(self._listener_tasks.discard)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.close()

    def publish(self, change: StationChange) -> None:
        """Queue change for every subscriber without waiting."""
        for subscription in list(self._subscriptions):
            subscription._offer(change)

    async def close(self) -> None:
        """End all subscriptions and wait for listener tasks to drain."""
        for subscription in list(self._subscriptions):
            subscription.close()
        if self._listener_tasks:
            await asyncio.gather(*self._listener_tasks, return_exceptions=True)

    def _discard(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @staticmethod
    async def _dispatch(subscription: Subscription, callback: Listener) -> None:
        async for change in subscription:
            try:
                result = callback(change)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    f"Station change listener failed for station {change.station.id}"
                )
