from typing import Any, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.broadcast_metrics import metrics
from src.service.seating.app.interface.i_seat_change_broadcaster import ISeatChangeBroadcaster
from src.service.seating.app.interface.i_seat_record_repo import ISeatRecordRepo
from src.service.shared_kernel.domain.domain_event.seat_change_event import SeatChangeEvent
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


class ClearSeatUseCase:
    """
    Free a seat

    Clearing a seat that is already free still succeeds and still publishes,
    so every viewer converges on "free" whatever it showed before.
    """

    def __init__(
        self,
        seat_record_repo: ISeatRecordRepo,
        seat_change_broadcaster: ISeatChangeBroadcaster,
    ) -> None:
        self.seat_record_repo = seat_record_repo
        self.seat_change_broadcaster = seat_change_broadcaster

    @classmethod
    @inject
    def depends(
        cls,
        seat_record_repo: ISeatRecordRepo = Depends(Provide[Container.seat_record_repo]),
        seat_change_broadcaster: ISeatChangeBroadcaster = Depends(
            Provide[Container.seat_change_broadcaster]
        ),
    ) -> Self:
        return cls(
            seat_record_repo=seat_record_repo,
            seat_change_broadcaster=seat_change_broadcaster,
        )

    @Logger.io
    async def execute(
        self,
        *,
        section: Optional[str],
        row: Optional[str],
        number: Optional[Any],
        block: Optional[str],
    ) -> SeatRecord:
        key = SeatKey.create(section=section, row=row, number=number, block=block)

        try:
            removed = await self.seat_record_repo.delete(key=key)
        except CustomBaseError:
            metrics.record_seat_write(operation='clear', result='error')
            raise
        metrics.record_seat_write(operation='clear', result='success')

        if removed is None:
            Logger.base.info(f'ℹ️ [CLEAR] {key.seat_id} was already free')

        record = SeatRecord(key=key)
        delivered = await self.seat_change_broadcaster.broadcast(
            event=SeatChangeEvent.seat_cleared(record)
        )
        Logger.base.info(f'🧹 [CLEAR] {key.seat_id} cleared (notified {delivered} subscribers)')
        return record
