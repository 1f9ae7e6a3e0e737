from typing import Optional

import attrs

from src.service.seating.domain.enum.seat_table_enums import (
    OccupancyStatus,
    SeatSortField,
    SortDirection,
)
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord


@attrs.define(frozen=True)
class SeatTableQuery:
    """Filters and ordering for the seat table view; empty filters match everything."""

    section: Optional[str] = None
    row: Optional[str] = None
    block: Optional[str] = None
    status: Optional[OccupancyStatus] = None
    sort_field: SeatSortField = SeatSortField.ROW
    sort_dir: SortDirection = SortDirection.ASC

    def matches(self, record: SeatRecord) -> bool:
        key = record.key
        if self.section and key.section.lower() != self.section.lower():
            return False
        if self.row and key.row != self.row:
            return False
        if self.block and key.block != self.block:
            return False
        if self.status is OccupancyStatus.OCCUPIED and not record.is_occupied:
            return False
        if self.status is OccupancyStatus.EMPTY and record.is_occupied:
            return False
        return True
