from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.seating.app.interface.i_seat_record_repo import ISeatRecordRepo
from src.service.seating.app.interface.i_seat_table_exporter import ISeatTableExporter
from src.service.seating.app.query.list_seat_table_use_case import ListSeatTableUseCase
from src.service.seating.domain.value_object.seat_table_query import SeatTableQuery


@attrs.define(frozen=True)
class ExportedFile:
    filename: str
    media_type: str
    content: bytes


class ExportSeatTableUseCase:
    """Same rows as the table view, rendered by the injected exporter"""

    FILENAME_STEM = 'theater_seats'

    def __init__(
        self,
        list_seat_table_use_case: ListSeatTableUseCase,
        seat_table_exporter: ISeatTableExporter,
    ) -> None:
        self.list_seat_table_use_case = list_seat_table_use_case
        self.seat_table_exporter = seat_table_exporter

    @classmethod
    @inject
    def depends(
        cls,
        seat_record_repo: ISeatRecordRepo = Depends(Provide[Container.seat_record_repo]),
        seat_table_exporter: ISeatTableExporter = Depends(Provide[Container.seat_table_exporter]),
    ) -> Self:
        return cls(
            list_seat_table_use_case=ListSeatTableUseCase(seat_record_repo=seat_record_repo),
            seat_table_exporter=seat_table_exporter,
        )

    @Logger.io(truncate_content=True)
    async def execute(self, *, query: Optional[SeatTableQuery] = None) -> ExportedFile:
        rows = await self.list_seat_table_use_case.execute(query=query)
        content = self.seat_table_exporter.export(rows)
        Logger.base.info(f'📥 [EXPORT] {len(rows)} rows, {len(content)} bytes')
        return ExportedFile(
            filename=f'{self.FILENAME_STEM}.{self.seat_table_exporter.file_extension}',
            media_type=self.seat_table_exporter.media_type,
            content=content,
        )
