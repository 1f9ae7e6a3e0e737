"""
Stream Seat Updates Use Case

SSE streaming of seat change frames from the broadcast hub.
"""

from collections.abc import AsyncGenerator
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.event.broadcast_hub import Subscription
from src.platform.event.i_broadcast_hub import IBroadcastHub
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.seat_event_codec import KEEPALIVE_FRAME


class StreamSeatUpdatesUseCase:
    """Use case for streaming seat updates via SSE."""

    def __init__(self, broadcast_hub: IBroadcastHub) -> None:
        self.broadcast_hub = broadcast_hub

    @classmethod
    @inject
    def depends(
        cls,
        broadcast_hub: IBroadcastHub = Depends(Provide[Container.broadcast_hub]),
    ) -> Self:
        return cls(broadcast_hub=broadcast_hub)

    async def subscribe(self) -> Subscription:
        return await self.broadcast_hub.subscribe()

    async def stream(self, *, subscription: Subscription) -> AsyncGenerator[str, None]:
        """
        Yield frames for one subscriber until its channel closes.

        Yields:
            The keepalive marker first, then every frame the hub delivers

        Note:
            The subscriber is deregistered when the generator is closed
            (client disconnect cancels the SSE response task)
        """
        try:
            yield KEEPALIVE_FRAME
            async with subscription.receive_stream:
                async for frame in subscription.receive_stream:
                    yield frame
        finally:
            await self.broadcast_hub.unsubscribe(subscription)
            Logger.base.info(f'🔌 [SSE] Stream for {subscription.handle_id} closed')
