from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import StorageError
from src.platform.logging.loguru_io import Logger
from src.service.seating.app.interface.i_seat_record_repo import ISeatRecordRepo
from src.service.seating.driven_adapter.model.seat_model import SeatModel
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


# Dialects with INSERT .. ON CONFLICT DO UPDATE on the seat location constraint
_UPSERT_INSERTS = {'sqlite': sqlite_insert, 'postgresql': postgresql_insert}


class SeatRecordRepoImpl(ISeatRecordRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _where_key(key: SeatKey):
        return (
            (SeatModel.section == key.section)
            & (SeatModel.row == key.row)
            & (SeatModel.number == key.number)
            & (SeatModel.block == key.block)
        )

    @staticmethod
    def _model_to_record(model: SeatModel) -> SeatRecord:
        return SeatRecord(
            key=SeatKey(
                section=model.section, row=model.row, number=model.number, block=model.block
            ),
            occupant_name=model.name,
        )

    @Logger.io(truncate_content=True)
    async def get_all(self) -> List[SeatRecord]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(SeatModel).order_by(SeatModel.id))
                return [self._model_to_record(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StorageError(f'Failed to load seats: {e}') from e

    @Logger.io
    async def upsert(self, *, key: SeatKey, occupant_name: Optional[str]) -> SeatRecord:
        """Single INSERT .. ON CONFLICT statement, so concurrent first writes cannot collide."""
        try:
            async with self.session_factory() as session:
                dialect = session.get_bind().dialect.name
                if (insert := _UPSERT_INSERTS.get(dialect)) is None:
                    raise StorageError(f'Seat upsert is not supported on {dialect}')
                stmt = insert(SeatModel).values(
                    section=key.section,
                    row=key.row,
                    number=key.number,
                    block=key.block,
                    name=occupant_name,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[
                        SeatModel.section,
                        SeatModel.row,
                        SeatModel.number,
                        SeatModel.block,
                    ],
                    set_={'name': stmt.excluded.name, 'updated_at': func.now()},
                )
                await session.execute(stmt)
                await session.commit()
                return SeatRecord(key=key, occupant_name=occupant_name)
        except SQLAlchemyError as e:
            raise StorageError(f'Failed to save seat {key.seat_id}: {e}') from e

    @Logger.io
    async def delete(self, *, key: SeatKey) -> Optional[SeatRecord]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(SeatModel).where(self._where_key(key)))
                model = result.scalar_one_or_none()
                if model is None:
                    return None
                record = self._model_to_record(model)
                await session.delete(model)
                await session.commit()
                return record
        except SQLAlchemyError as e:
            raise StorageError(f'Failed to clear seat {key.seat_id}: {e}') from e
