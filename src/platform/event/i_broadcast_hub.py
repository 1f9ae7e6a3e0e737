"""
Broadcast Hub Interface

Process-wide fan-out of encoded event stream frames to every connected
subscriber (one per open SSE response).
"""

from typing import Protocol

from src.platform.event.broadcast_hub import Subscription


class IBroadcastHub(Protocol):
    """
    Interface for the in-process broadcast hub

    Delivery is best effort: a subscriber that cannot take a frame is
    deregistered, the others are unaffected.
    """

    @property
    def subscriber_count(self) -> int: ...

    async def subscribe(self) -> Subscription:
        """
        Register a new subscriber channel

        Returns:
            Subscription handle holding the receive side of the channel
        """
        ...

    async def unsubscribe(self, subscription: Subscription) -> None:
        """
        Remove a subscriber and close its channel

        Note:
            Idempotent - unknown or already removed handles are ignored
        """
        ...

    async def publish(self, message: str) -> int:
        """
        Deliver one frame to every subscriber registered right now

        Returns:
            Number of subscribers the frame was delivered to
        """
        ...

    async def send_heartbeat(self) -> int:
        """Deliver the keepalive frame to every subscriber"""
        ...
