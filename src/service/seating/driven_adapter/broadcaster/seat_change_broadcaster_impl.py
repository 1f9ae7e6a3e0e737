"""
Seat Change Broadcaster Implementation

Encodes seat changes once and fans the frame out through the in-process hub.
"""

from src.platform.event.i_broadcast_hub import IBroadcastHub
from src.platform.logging.loguru_io import Logger
from src.service.seating.app.interface.i_seat_change_broadcaster import ISeatChangeBroadcaster
from src.service.shared_kernel.app.seat_event_codec import SeatEventCodec
from src.service.shared_kernel.domain.domain_event.seat_change_event import SeatChangeEvent


class SeatChangeBroadcasterImpl(ISeatChangeBroadcaster):
    def __init__(self, *, broadcast_hub: IBroadcastHub) -> None:
        self.broadcast_hub = broadcast_hub

    async def broadcast(self, *, event: SeatChangeEvent) -> int:
        frame = SeatEventCodec.encode(event)
        delivered = await self.broadcast_hub.publish(frame)
        Logger.base.debug(
            f'📡 [BROADCAST] {event.kind} {event.record.key.seat_id} '
            f'-> {delivered}/{self.broadcast_hub.subscriber_count} subscribers'
        )
        return delivered
