"""
In-memory Broadcast Hub Implementation

Single registry of event stream subscribers for the whole process.
Created once by the DI container at startup and closed in the app lifespan.
"""

from datetime import datetime, timezone
from typing import Dict, List, Tuple

import anyio
from anyio import BrokenResourceError, ClosedResourceError, WouldBlock, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
import attrs
import uuid_utils as uuid
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.broadcast_metrics import metrics


@attrs.define(eq=False)
class Subscription:
    """Handle for one registered subscriber channel"""

    handle_id: UUID
    receive_stream: MemoryObjectReceiveStream[str]
    send_stream: MemoryObjectSendStream[str] = attrs.field(repr=False)
    connected_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))


class InMemoryBroadcastHub:
    """
    In-memory pub/sub for seat update frames

    Architecture:
    - Mutating endpoint -> publish() -> every subscriber channel -> SSE response
    - One bounded anyio memory stream per subscriber
    - publish() iterates a snapshot of the registry, so subscribers may come
      and go while a publish is running

    Failure handling:
    - send_nowait() never suspends, a slow subscriber cannot stall the others
    - Full buffer (WouldBlock) or closed receiver counts as a failed delivery
      and the subscriber is deregistered on the spot
    - Keepalive frames follow the same rule
    """

    def __init__(
        self,
        *,
        buffer_size: int = 100,
        heartbeat_interval: float = 30.0,
        keepalive_message: str = 'keepalive',
    ) -> None:
        self._buffer_size = buffer_size
        self._heartbeat_interval = heartbeat_interval
        self._keepalive_message = keepalive_message
        self._subscribers: Dict[UUID, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def is_subscribed(self, subscription: Subscription) -> bool:
        return subscription.handle_id in self._subscribers

    async def subscribe(self) -> Subscription:
        send_stream, receive_stream = create_memory_object_stream[str](
            max_buffer_size=self._buffer_size
        )
        subscription = Subscription(
            handle_id=uuid.uuid7(), receive_stream=receive_stream, send_stream=send_stream
        )
        self._subscribers[subscription.handle_id] = subscription
        metrics.active_subscribers.inc()

        Logger.base.info(
            f'📡 [HUB] Subscriber {subscription.handle_id} connected '
            f'(total subscribers: {len(self._subscribers)})'
        )
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscribers.pop(subscription.handle_id, None) is None:
            return

        metrics.active_subscribers.dec()
        # Receiver drains what is buffered, then sees end of stream
        await subscription.send_stream.aclose()

        Logger.base.info(
            f'🔌 [HUB] Subscriber {subscription.handle_id} removed '
            f'(remaining: {len(self._subscribers)})'
        )

    async def publish(self, message: str) -> int:
        delivered = await self._deliver(message)
        metrics.record_delivery(frame_type='event', delivered=delivered)
        Logger.base.debug(f'📤 [HUB] Published frame to {delivered} subscribers')
        return delivered

    async def send_heartbeat(self) -> int:
        delivered = await self._deliver(self._keepalive_message)
        metrics.record_delivery(frame_type='keepalive', delivered=delivered)
        return delivered

    async def run_heartbeat(self) -> None:
        """Send keepalive frames forever; run inside the app lifespan task group."""
        Logger.base.info(f'💓 [HUB] Heartbeat every {self._heartbeat_interval}s')
        while True:
            await anyio.sleep(self._heartbeat_interval)
            await self.send_heartbeat()

    async def close(self) -> None:
        for subscription in tuple(self._subscribers.values()):
            await self.unsubscribe(subscription)
        Logger.base.info('👋 [HUB] All subscribers closed')

    async def _deliver(self, message: str) -> int:
        delivered = 0
        failed: List[Tuple[Subscription, str]] = []

        for subscription in tuple(self._subscribers.values()):
            try:
                subscription.send_stream.send_nowait(message)
                delivered += 1
            except WouldBlock:
                failed.append((subscription, 'buffer_full'))
            except (BrokenResourceError, ClosedResourceError):
                failed.append((subscription, 'closed'))

        for subscription, reason in failed:
            Logger.base.warning(
                f'⚠️ [HUB] Delivery to {subscription.handle_id} failed ({reason}), deregistering'
            )
            metrics.record_delivery_failure(reason=reason)
            await self.unsubscribe(subscription)

        return delivered
