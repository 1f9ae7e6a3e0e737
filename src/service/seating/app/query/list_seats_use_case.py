from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.seating.app.interface.i_seat_record_repo import ISeatRecordRepo
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord


class ListSeatsUseCase:
    def __init__(self, seat_record_repo: ISeatRecordRepo) -> None:
        self.seat_record_repo = seat_record_repo

    @classmethod
    @inject
    def depends(
        cls,
        seat_record_repo: ISeatRecordRepo = Depends(Provide[Container.seat_record_repo]),
    ) -> Self:
        return cls(seat_record_repo=seat_record_repo)

    @Logger.io(truncate_content=True)
    async def get_all(self) -> List[SeatRecord]:
        """Full snapshot of stored seat records."""
        return await self.seat_record_repo.get_all()
