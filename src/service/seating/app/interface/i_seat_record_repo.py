from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


class ISeatRecordRepo(ABC):
    """Seat record store - single source of truth for seat occupancy"""

    @abstractmethod
    async def get_all(self) -> List[SeatRecord]:
        pass

    @abstractmethod
    async def upsert(self, *, key: SeatKey, occupant_name: Optional[str]) -> SeatRecord:
        """Create or replace the record for `key`; last write wins."""
        pass

    @abstractmethod
    async def delete(self, *, key: SeatKey) -> Optional[SeatRecord]:
        """Remove the record for `key`; returns the removed record, None if there was none."""
        pass
