"""
In-process broadcast hub - Implements EventPublisher protocol.

Fans each published RegistrationEvent out to every open Subscription.

Concurrency Design:
------------------
Publishers may run on any thread (sync route handlers run in the server's
threadpool) while subscribers await on the event loop. The hub keeps its
subscriber set behind a lock, and each publish offers the event to every
subscriber while holding that lock, so all subscribers see events in the
same relative order.

Each Subscription owns a bounded deque. When it is full, the oldest unread
event is dropped and counted; the subscriber sees a SubscriptionLagged
signal carrying the count on its next receive, then continues with the
events that remain. Publishing never waits on a subscriber.

Waking a subscriber from another thread goes through
``loop.call_soon_threadsafe`` on the loop that created the subscription.
"""

import asyncio
import logging
import threading
from collections import deque

from invito.domain.models import RegistrationEvent

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class SubscriptionLagged(Exception):
    """Older events were dropped because the subscriber fell behind."""

    def __init__(self, missed: int) -> None:
        self.missed = missed
        super().__init__(f"subscription lagged, {missed} event(s) dropped")


class SubscriptionClosed(Exception):
    """The subscription (or its hub) has been closed."""

    pass


class Subscription:
    """
    One live connection's private view of the hub's event stream.

    Created by BroadcastHub.subscribe() from inside a running event loop.
    Use ``await receive()`` to get the next event and ``close()`` to
    release it; it also works as an async context manager.
    """

    def __init__(
        self, hub: "BroadcastHub", capacity: int, loop: asyncio.AbstractEventLoop
    ) -> None:
        self._hub = hub
        self._loop = loop
        self._buffer: deque[RegistrationEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._wakeup = asyncio.Event()
        self._missed = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of buffered, unread events."""
        with self._lock:
            return len(self._buffer)

    async def receive(self) -> RegistrationEvent:
        """
        Wait for the next event.

        Raises:
            SubscriptionLagged: Once after events were dropped; call again
                to continue with the remaining events
            SubscriptionClosed: When closed and nothing is left to read
        """
        while True:
            with self._lock:
                if self._missed:
                    missed, self._missed = self._missed, 0
                    raise SubscriptionLagged(missed)
                if self._buffer:
                    return self._buffer.popleft()
                if self._closed:
                    raise SubscriptionClosed()
                self._wakeup.clear()
            await self._wakeup.wait()

    def close(self) -> None:
        """Detach from the hub and drop anything still buffered."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._buffer.clear()
            self._missed = 0
        self._hub._discard(self)
        self._notify()

    def _offer(self, event: RegistrationEvent) -> None:
        """Buffer an event, dropping the oldest one when full. Called by the hub."""
        with self._lock:
            if self._closed:
                return
            if len(self._buffer) == self._buffer.maxlen:
                self._missed += 1
            self._buffer.append(event)
        self._notify()

    def _notify(self) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._wakeup.set()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._wakeup.set)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class BroadcastHub:
    """
    Implements EventPublisher protocol for in-process live subscribers.

    Uses structural subtyping - no explicit inheritance from Protocol.
    One hub is created per application at startup and closed at shutdown.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """
        Initialize an empty hub.

        Args:
            capacity: Maximum unread events buffered per subscriber
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._subscriptions: set[Subscription] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self) -> Subscription:
        """
        Register a new subscriber on the running event loop.

        Raises:
            SubscriptionClosed: If the hub has been closed
        """
        subscription = Subscription(self, self._capacity, asyncio.get_running_loop())
        with self._lock:
            if self._closed:
                raise SubscriptionClosed()
            self._subscriptions.add(subscription)
            count = len(self._subscriptions)
        logger.debug("Subscriber added (%d active)", count)
        return subscription

    def publish(self, event: RegistrationEvent) -> int:
        """
        Offer an event to every current subscriber without blocking.

        Returns:
            Number of subscribers the event was offered to; 0 means the
            event was dropped because nobody is listening
        """
        with self._lock:
            for subscription in self._subscriptions:
                subscription._offer(event)
            return len(self._subscriptions)

    def close(self) -> None:
        """Close every subscription and refuse new ones."""
        with self._lock:
            self._closed = True
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.close()
        logger.info("Broadcast hub closed (%d subscriber(s) released)", len(subscriptions))

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.discard(subscription)
            count = len(self._subscriptions)
        logger.debug("Subscriber removed (%d active)", count)
