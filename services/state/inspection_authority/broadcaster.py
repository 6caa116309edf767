"""Push-update connection registry for IAS.

The registry owns every open server-push subscription. Each subscription is
bound to the event loop of the HTTP stream consuming it; producers on any
thread hand complete frames to that loop without blocking.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from contextlib import suppress
from datetime import datetime
from enum import StrEnum
from threading import Lock
from uuid import uuid4

from packages.fieldlog_shared.logging import fields, get_logger
from services.state.inspection_authority.domain import (
    InspectionSnapshot,
    SnapshotKind,
    utc_now,
)
from services.state.inspection_authority.interfaces import InspectionRepository

_LOGGER = get_logger(__name__)

HEARTBEAT_FRAME = ": heartbeat\n\n"


class SubscriberDeliveryFailure(Exception):
    """Raised when one subscription cannot accept another frame."""

    def __init__(self, subscription_id: str, reason: str) -> None:
        super().__init__(f"subscription {subscription_id} rejected frame: {reason}")
        self.subscription_id = subscription_id
        self.reason = reason


class SubscriptionState(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


def encode_frame(snapshot: InspectionSnapshot) -> str:
    """Render one snapshot as a complete SSE data frame."""
    body = json.dumps(snapshot.to_json(), separators=(",", ":"))
    return f"data: {body}\n\n"


class Subscription:
    """One open push-update stream with a bounded frame backlog."""

    def __init__(
        self,
        *,
        subscription_id: str,
        loop: asyncio.AbstractEventLoop,
        max_pending: int,
    ) -> None:
        self.id = subscription_id
        self._loop = loop
        self._max_pending = max_pending
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._pending = 0
        self._state = SubscriptionState.OPEN
        self._lock = Lock()

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is SubscriptionState.CLOSED

    @property
    def pending(self) -> int:
        """Return frames handed over but not yet consumed."""
        with self._lock:
            return self._pending

    def deliver(self, frame: str) -> None:
        """Queue one frame for the consumer without blocking.

        Safe to call from any thread. Raises ``SubscriberDeliveryFailure``
        when the subscription is closed, its backlog is full, or the
        consuming event loop has gone away.
        """
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                raise SubscriberDeliveryFailure(self.id, "closed")
            if self._pending >= self._max_pending:
                raise SubscriberDeliveryFailure(self.id, "backlog_full")
            self._pending += 1
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, frame)
        except RuntimeError as exc:
            with self._lock:
                self._pending -= 1
            raise SubscriberDeliveryFailure(self.id, "loop_closed") from exc

    def close(self) -> bool:
        """Move to ``CLOSED`` and wake the consumer; ``False`` if already closed."""
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return False
            self._state = SubscriptionState.CLOSED
        # Consumer loop may already be shut down; nothing is left to wake.
        with suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._queue.put_nowait, None)
        return True

    async def frames(self, *, heartbeat_interval: float) -> AsyncIterator[str]:
        """Yield queued frames, interleaving heartbeats on a fixed cadence.

        Must run on the loop this subscription is bound to. Frames already
        queued when the subscription closes are still yielded; iteration
        ends once the close marker is reached.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + heartbeat_interval
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                if self.closed:
                    return
                yield HEARTBEAT_FRAME
                deadline += heartbeat_interval
                if deadline <= loop.time():
                    deadline = loop.time() + heartbeat_interval
                continue
            try:
                frame = await asyncio.wait_for(self._queue.get(), timeout=remaining)
            except asyncio.TimeoutError:
                continue
            if frame is None:
                return
            with self._lock:
                self._pending -= 1
            yield frame


class ConnectionRegistry:
    """Registry and fan-out broadcaster for open push-update subscriptions.

    Membership changes take ``_lock``. Snapshot reads and their fan-out take
    ``_publish_lock`` so every subscriber sees its ``initial`` frame first
    and later ``update`` frames in snapshot order.
    """

    def __init__(
        self,
        *,
        repository: InspectionRepository,
        max_pending_frames: int = 32,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if max_pending_frames <= 0:
            raise ValueError("max_pending_frames must be > 0")
        self._repository = repository
        self._max_pending_frames = max_pending_frames
        self._clock = clock
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = Lock()
        self._publish_lock = Lock()
        self._closed = False

    @property
    def active_connections(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, *, loop: asyncio.AbstractEventLoop | None = None) -> Subscription:
        """Register one subscriber after handing it the ``initial`` snapshot.

        ``loop`` is the event loop that will consume the subscription; it
        defaults to the running loop. Raises ``StorageUnavailable`` when the
        snapshot cannot be read, in which case nothing is registered.
        """
        subscription = Subscription(
            subscription_id=str(uuid4()),
            loop=loop or asyncio.get_running_loop(),
            max_pending=self._max_pending_frames,
        )
        with self._publish_lock:
            if self._closed:
                raise RuntimeError("connection registry is closed")
            subscription.deliver(encode_frame(self._snapshot(SnapshotKind.INITIAL)))
            with self._lock:
                self._subscriptions[subscription.id] = subscription
                active = len(self._subscriptions)
        _LOGGER.info(
            "Subscriber connected",
            extra={
                fields.SUBSCRIPTION_ID: subscription.id,
                fields.ACTIVE_CONNECTIONS: active,
            },
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove and close one subscription; unknown handles are a no-op."""
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
            active = len(self._subscriptions)
        subscription.close()
        if removed is None:
            return False
        _LOGGER.info(
            "Subscriber disconnected",
            extra={
                fields.SUBSCRIPTION_ID: subscription.id,
                fields.ACTIVE_CONNECTIONS: active,
            },
        )
        return True

    def broadcast(self) -> int:
        """Deliver one ``update`` snapshot to every subscriber.

        Returns how many subscribers accepted the frame. Subscribers that
        reject it are dropped. Raises ``StorageUnavailable`` only when the
        snapshot itself cannot be read.
        """
        with self._publish_lock:
            with self._lock:
                targets = list(self._subscriptions.values())
            if not targets:
                return 0
            frame = encode_frame(self._snapshot(SnapshotKind.UPDATE))
            delivered = 0
            for subscription in targets:
                try:
                    subscription.deliver(frame)
                except SubscriberDeliveryFailure as exc:
                    _LOGGER.warning(
                        "Dropping subscriber after failed delivery",
                        extra={
                            fields.SUBSCRIPTION_ID: subscription.id,
                            fields.ERROR_TYPE: exc.reason,
                        },
                    )
                    self.unsubscribe(subscription)
                    continue
                delivered += 1
        _LOGGER.debug(
            "Broadcast fan-out complete",
            extra={
                fields.ACTIVE_CONNECTIONS: len(targets),
                "delivered": delivered,
            },
        )
        return delivered

    def close(self) -> int:
        """Close every subscription and refuse new ones; return how many closed."""
        with self._publish_lock:
            self._closed = True
            with self._lock:
                subscriptions = list(self._subscriptions.values())
                self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.close()
        if subscriptions:
            _LOGGER.info(
                "Connection registry closed",
                extra={fields.ACTIVE_CONNECTIONS: len(subscriptions)},
            )
        return len(subscriptions)

    def _snapshot(self, kind: SnapshotKind) -> InspectionSnapshot:
        records = self._repository.find_all()
        return InspectionSnapshot(
            kind=kind,
            inspections=tuple(records),
            generated_at=self._clock(),
        )
