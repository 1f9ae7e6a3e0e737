"""
Seat Change Broadcaster Interface

Abstraction for pushing seat changes to every connected event stream.

Follows Dependency Inversion Principle:
- Use cases depend on this interface
- The driven adapter encodes events and hands them to the platform broadcast hub
"""

from typing import Protocol

from src.service.shared_kernel.domain.domain_event.seat_change_event import SeatChangeEvent


class ISeatChangeBroadcaster(Protocol):
    """Protocol for broadcasting seat changes via SSE"""

    async def broadcast(self, *, event: SeatChangeEvent) -> int:
        """
        Broadcast a seat change to all subscribers

        Returns:
            Number of subscribers the event reached

        Note:
            Never raises for a failing subscriber - it is dropped from the hub
        """
        ...
