"""
Unit tests for UpsertSeatUseCase and ClearSeatUseCase

Flow under test: validate identity -> persist -> publish SEAT_UPDATE
"""

from unittest.mock import AsyncMock, Mock

import pytest

from src.platform.exception.exceptions import StorageError, ValidationError
from src.service.seating.app.command.clear_seat_use_case import ClearSeatUseCase
from src.service.seating.app.command.upsert_seat_use_case import UpsertSeatUseCase
from src.service.shared_kernel.domain.domain_event.seat_change_event import SeatChangeEvent
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


SEAT = {'section': 'gold', 'row': 'A', 'number': 3, 'block': 'left'}


@pytest.fixture
def seat_key() -> SeatKey:
    return SeatKey(**SEAT)


@pytest.fixture
def mock_seat_record_repo() -> Mock:
    repo = AsyncMock()
    repo.upsert = AsyncMock(
        side_effect=lambda *, key, occupant_name: SeatRecord(key=key, occupant_name=occupant_name)
    )
    repo.delete = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_broadcaster() -> Mock:
    broadcaster = AsyncMock()
    broadcaster.broadcast = AsyncMock(return_value=2)
    return broadcaster


@pytest.fixture
def upsert_use_case(mock_seat_record_repo, mock_broadcaster) -> UpsertSeatUseCase:
    return UpsertSeatUseCase(
        seat_record_repo=mock_seat_record_repo, seat_change_broadcaster=mock_broadcaster
    )


@pytest.fixture
def clear_use_case(mock_seat_record_repo, mock_broadcaster) -> ClearSeatUseCase:
    return ClearSeatUseCase(
        seat_record_repo=mock_seat_record_repo, seat_change_broadcaster=mock_broadcaster
    )


@pytest.mark.unit
class TestUpsertSeatUseCase:
    @pytest.mark.asyncio
    async def test_persists_then_publishes(
        self, upsert_use_case, mock_seat_record_repo, mock_broadcaster, seat_key
    ):
        record = await upsert_use_case.execute(**SEAT, occupant_name='Alice')

        assert record == SeatRecord(key=seat_key, occupant_name='Alice')
        mock_seat_record_repo.upsert.assert_awaited_once_with(key=seat_key, occupant_name='Alice')
        mock_broadcaster.broadcast.assert_awaited_once_with(
            event=SeatChangeEvent.seat_updated(record)
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize('name', [None, '', '   '])
    async def test_blank_name_is_stored_as_free(
        self, upsert_use_case, mock_seat_record_repo, seat_key, name
    ):
        record = await upsert_use_case.execute(**SEAT, occupant_name=name)

        assert record.occupant_name is None
        mock_seat_record_repo.upsert.assert_awaited_once_with(key=seat_key, occupant_name=None)

    @pytest.mark.asyncio
    async def test_missing_identity_is_rejected_before_storage(
        self, upsert_use_case, mock_seat_record_repo, mock_broadcaster
    ):
        with pytest.raises(ValidationError):
            await upsert_use_case.execute(
                section='gold', row=None, number=3, block='left', occupant_name='Alice'
            )

        mock_seat_record_repo.upsert.assert_not_awaited()
        mock_broadcaster.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure_is_not_published(
        self, upsert_use_case, mock_seat_record_repo, mock_broadcaster
    ):
        mock_seat_record_repo.upsert.side_effect = StorageError('database is down')

        with pytest.raises(StorageError):
            await upsert_use_case.execute(**SEAT, occupant_name='Alice')

        mock_broadcaster.broadcast.assert_not_awaited()


@pytest.mark.unit
class TestClearSeatUseCase:
    @pytest.mark.asyncio
    async def test_clear_occupied_seat(
        self, clear_use_case, mock_seat_record_repo, mock_broadcaster, seat_key
    ):
        mock_seat_record_repo.delete.return_value = SeatRecord(key=seat_key, occupant_name='Alice')

        record = await clear_use_case.execute(**SEAT)

        assert record == SeatRecord(key=seat_key)
        mock_seat_record_repo.delete.assert_awaited_once_with(key=seat_key)
        event = mock_broadcaster.broadcast.await_args.kwargs['event']
        assert event.is_clear
        assert event.record.key == seat_key

    @pytest.mark.asyncio
    async def test_clear_free_seat_still_publishes(self, clear_use_case, mock_broadcaster, seat_key):
        record = await clear_use_case.execute(**SEAT)

        assert record.occupant_name is None
        mock_broadcaster.broadcast.assert_awaited_once_with(
            event=SeatChangeEvent.seat_cleared(SeatRecord(key=seat_key))
        )

    @pytest.mark.asyncio
    async def test_invalid_number_is_rejected(self, clear_use_case, mock_seat_record_repo):
        with pytest.raises(ValidationError):
            await clear_use_case.execute(section='gold', row='A', number=0, block='left')

        mock_seat_record_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure_propagates(
        self, clear_use_case, mock_seat_record_repo, mock_broadcaster
    ):
        mock_seat_record_repo.delete.side_effect = StorageError('database is down')

        with pytest.raises(StorageError):
            await clear_use_case.execute(**SEAT)

        mock_broadcaster.broadcast.assert_not_awaited()
