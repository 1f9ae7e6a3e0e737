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


class UpsertSeatUseCase:
    """
    Assign (or free) a seat and tell every viewer about it

    Flow:
    1. Validate the seat identity (ValidationError -> 400)
    2. Persist through the seat record repo (StorageError -> 500, no retry)
    3. Publish SEAT_UPDATE to the broadcast hub, the writer's own stream included
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
        occupant_name: Optional[str],
    ) -> SeatRecord:
        key = SeatKey.create(section=section, row=row, number=number, block=block)
        name = occupant_name if occupant_name and occupant_name.strip() else None

        try:
            record = await self.seat_record_repo.upsert(key=key, occupant_name=name)
        except CustomBaseError:
            metrics.record_seat_write(operation='upsert', result='error')
            raise
        metrics.record_seat_write(operation='upsert', result='success')

        delivered = await self.seat_change_broadcaster.broadcast(
            event=SeatChangeEvent.seat_updated(record)
        )
        Logger.base.info(
            f'💺 [UPSERT] {key.seat_id} -> {record.occupant_name!r} '
            f'(notified {delivered} subscribers)'
        )
        return record
