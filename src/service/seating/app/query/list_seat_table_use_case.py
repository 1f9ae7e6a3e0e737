"""
List Seat Table Use Case

Joins the static theater geometry with stored occupancy, then filters and
sorts it for the table view and the spreadsheet export. Stored records for
seats outside the geometry are not listed.
"""

from typing import Dict, List, Optional, Self, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.seating.app.interface.i_seat_record_repo import ISeatRecordRepo
from src.service.seating.domain.enum.seat_table_enums import SeatSortField, SortDirection
from src.service.seating.domain.value_object.seat_table_query import SeatTableQuery
from src.service.seating.domain.value_object.section_layout import (
    THEATER_LAYOUT,
    SectionLayout,
    generate_all_seats,
)
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


class ListSeatTableUseCase:
    def __init__(
        self,
        seat_record_repo: ISeatRecordRepo,
        layout: Tuple[SectionLayout, ...] = THEATER_LAYOUT,
    ) -> None:
        self.seat_record_repo = seat_record_repo
        self.layout = layout

    @classmethod
    @inject
    def depends(
        cls,
        seat_record_repo: ISeatRecordRepo = Depends(Provide[Container.seat_record_repo]),
    ) -> Self:
        return cls(seat_record_repo=seat_record_repo)

    @Logger.io(truncate_content=True)
    async def execute(self, *, query: Optional[SeatTableQuery] = None) -> List[SeatRecord]:
        query = query or SeatTableQuery()
        occupants: Dict[SeatKey, str] = {
            record.key: record.occupant_name
            for record in await self.seat_record_repo.get_all()
            if record.occupant_name is not None
        }

        rows = [
            SeatRecord(key=key, occupant_name=occupants.get(key))
            for key in generate_all_seats(self.layout)
        ]
        rows = [row for row in rows if query.matches(row)]

        # Stable sort on top of the geometry order
        reverse = query.sort_dir is SortDirection.DESC
        if query.sort_field is SeatSortField.NUMBER:
            rows.sort(key=lambda r: r.key.number, reverse=reverse)
        else:
            rows.sort(key=lambda r: r.key.row, reverse=reverse)

        Logger.base.info(f'📋 [SEAT_TABLE] {len(rows)} rows for {query}')
        return rows
