"""
Live updates - Server-Sent Events stream of new registrations.

Each connection gets its own hub Subscription and receives, in order:

1. ``connected`` with empty data, as soon as the stream opens
2. ``user_created`` with ``{"user": {...}}`` for every registration
3. ``heartbeat`` with ``{"status": "alive"}`` whenever the stream was idle
   for ``heartbeat_seconds``
4. ``lagged`` with ``{"missed": n}`` if this client fell behind and older
   events were dropped

The subscription is released when the client disconnects, when the
response task is cancelled, or when the hub shuts down.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from invito.adapters.broadcast.hub import BroadcastHub, SubscriptionClosed, SubscriptionLagged
from invito.api.models import UserCreatedPayload, UserResponse
from invito.domain.models import RegistrationEvent

logger = logging.getLogger(__name__)

CONNECTED_EVENT = "connected"
USER_CREATED_EVENT = "user_created"
HEARTBEAT_EVENT = "heartbeat"
LAGGED_EVENT = "lagged"

HEARTBEAT_DATA = json.dumps({"status": "alive"})


def format_sse(event: str, data: str = "") -> str:
    """Encode one Server-Sent Events frame."""
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in (data.splitlines() or [""]))
    return "\n".join(lines) + "\n\n"


def serialize_event(event: RegistrationEvent) -> str:
    payload = UserCreatedPayload(user=UserResponse.model_validate(event.user))
    return payload.model_dump_json()


async def live_event_stream(
    hub: BroadcastHub,
    is_disconnected: Callable[[], Awaitable[bool]],
    heartbeat_seconds: float,
) -> AsyncIterator[str]:
    """
    Yield SSE frames for one client until it disconnects.

    Args:
        hub: Broadcast hub to subscribe to
        is_disconnected: Coroutine function reporting client disconnect
        heartbeat_seconds: Idle interval between heartbeat frames
    """
    subscription = hub.subscribe()
    try:
        yield format_sse(CONNECTED_EVENT)

        while not await is_disconnected():
            try:
                event = await asyncio.wait_for(subscription.receive(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield format_sse(HEARTBEAT_EVENT, HEARTBEAT_DATA)
                continue
            except SubscriptionLagged as e:
                logger.warning("Live subscriber lagged, %d event(s) dropped", e.missed)
                yield format_sse(LAGGED_EVENT, json.dumps({"missed": e.missed}))
                continue
            except SubscriptionClosed:
                return

            yield format_sse(USER_CREATED_EVENT, serialize_event(event))
    finally:
        subscription.close()
