from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import List, Optional

from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


class ISeatApi(ABC):
    """
    Client side of the seat HTTP API

    Errors:
    - ValidationError: the server rejected the seat identity (400)
    - StorageError: the server failed to read or write (5xx)
    - TransportError: the request or the event stream could not complete
    """

    @abstractmethod
    async def fetch_snapshot(self) -> List[SeatRecord]:
        pass

    @abstractmethod
    async def upsert_seat(self, *, key: SeatKey, occupant_name: Optional[str]) -> SeatRecord:
        pass

    @abstractmethod
    async def clear_seat(self, *, key: SeatKey) -> SeatRecord:
        """Free a seat; a seat that is already gone counts as cleared."""
        pass

    @abstractmethod
    def open_stream(self) -> AbstractAsyncContextManager[AsyncIterator[str]]:
        """
        Open the seat update stream

        Entering the context means the server accepted the subscription.
        The iterator yields raw frames (keepalive marker or JSON event) and
        stops when the server ends the stream.
        """
        pass
