"""
Unit tests for SeatSyncClient against a scriptable seat API

Covers:
- Connection sequence: snapshot, stream, snapshot, SYNCED
- Pending edits across a resync: settled ones dropped, unsent or unanswered kept
- Debounced optimistic edits and their failure path
- Reconnect with a fixed delay
- Shutdown: pending timers cancelled, in-flight writes completed
"""

from collections.abc import Generator
from typing import List

import anyio
from anyio import fail_after
import pytest

from src.platform.exception.exceptions import StorageError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.seat_sync_client.app.seat_sync_client import SeatSyncClient
from src.service.seat_sync_client.domain.enum.sync_state import SyncState
from src.service.seat_sync_client.domain.value_object.notification import Notification
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey
from test.fakes import FakeSeatApi, wait_until


A3 = SeatKey(section='gold', row='A', number=3, block='left')
DEBOUNCE = 0.05
RECONNECT = 0.05


@pytest.fixture
def seat_api() -> FakeSeatApi:
    return FakeSeatApi([SeatRecord(key=A3, occupant_name='Alice')])


@pytest.fixture
def notes() -> List[Notification]:
    return []


@pytest.fixture
def states() -> List[SyncState]:
    return []


@pytest.fixture
def log_messages() -> Generator[List[str], None, None]:
    captured: List[str] = []
    sink_id = Logger.base.add(lambda m: captured.append(m.record['message']), level='INFO')
    yield captured
    Logger.base.remove(sink_id)


@pytest.fixture
def sync_client(seat_api, notes, states) -> SeatSyncClient:
    return SeatSyncClient(
        seat_api=seat_api,
        notifier=notes.append,
        on_state_change=states.append,
        debounce_delay=DEBOUNCE,
        reconnect_delay=RECONNECT,
    )


@pytest.mark.unit
class TestConnection:
    @pytest.mark.asyncio
    async def test_fetches_snapshot_around_subscription(self, sync_client, seat_api, states):
        async with sync_client:
            with fail_after(1.0):
                await sync_client.wait_synced()

            assert sync_client.state is SyncState.SYNCED
            assert seat_api.snapshot_calls == 2
            assert seat_api.streams_opened == 1
            assert sync_client.display_value(A3) == 'Alice'

        assert states == [SyncState.SYNCED, SyncState.TERMINATED]

    @pytest.mark.asyncio
    async def test_reconciles_stream_events(self, sync_client, seat_api, notes):
        b2 = SeatKey(section='gold', row='B', number=2, block='right')
        async with sync_client:
            await sync_client.wait_synced()

            await seat_api.push_event(SeatRecord(key=b2, occupant_name='Bob'))
            await seat_api.push_event(SeatRecord(key=A3))
            await wait_until(lambda: len(notes) == 2)

            assert sync_client.display_value(b2) == 'Bob'
            assert sync_client.display_value(A3) is None
            assert notes == [
                Notification.info('Seat B-2 was updated'),
                Notification.info('Seat A-3 was cleared'),
            ]

    @pytest.mark.asyncio
    async def test_drops_keepalive_and_malformed_frames(self, sync_client, seat_api, notes):
        async with sync_client:
            await sync_client.wait_synced()

            for frame in ('keepalive', 'not json', '[1, 2]', '{"type": "OTHER", "seat": {}}'):
                await seat_api.push(frame)
            await seat_api.push_event(SeatRecord(key=A3, occupant_name='Carol'))
            await wait_until(lambda: len(notes) == 1)

            assert sync_client.state is SyncState.SYNCED
            assert sync_client.display_value(A3) == 'Carol'

    @pytest.mark.asyncio
    async def test_reconnects_when_stream_ends(self, sync_client, seat_api, states):
        async with sync_client:
            await sync_client.wait_synced()
            seat_api.records[A3] = SeatRecord(key=A3, occupant_name='Dave')

            await seat_api.end_stream()
            await wait_until(lambda: states[-1] is SyncState.SYNCED and len(states) == 3)

            assert states == [SyncState.SYNCED, SyncState.RECONNECTING, SyncState.SYNCED]
            assert seat_api.snapshot_calls == 4
            assert seat_api.streams_opened == 2
            # Missed while disconnected, recovered from the snapshot
            assert sync_client.display_value(A3) == 'Dave'

    @pytest.mark.asyncio
    async def test_resync_replaces_written_edit_whose_echo_was_lost(
        self, sync_client, seat_api, states
    ):
        async with sync_client:
            await sync_client.wait_synced()
            sync_client.edit(A3, 'Zed')
            await wait_until(lambda: seat_api.completed_writes == 1)

            # Another viewer overwrites the seat; the echo of Zed never arrives
            seat_api.records[A3] = SeatRecord(key=A3, occupant_name='Eve')
            await seat_api.end_stream()
            await wait_until(lambda: states[-1] is SyncState.SYNCED and len(states) == 3)

            assert sync_client.display_value(A3) == 'Eve'
            assert not sync_client.view.is_pending(A3)

    @pytest.mark.asyncio
    async def test_resync_keeps_edit_with_write_in_flight(self, sync_client, seat_api, states):
        seat_api.write_delay = 0.3
        async with sync_client:
            await sync_client.wait_synced()
            sync_client.edit(A3, 'Zed')
            await wait_until(lambda: seat_api.upsert_calls)

            await seat_api.end_stream()
            await wait_until(lambda: states[-1] is SyncState.SYNCED and len(states) == 3)

            assert seat_api.completed_writes == 0
            assert sync_client.display_value(A3) == 'Zed'

    @pytest.mark.asyncio
    async def test_resync_keeps_edit_still_debouncing(self, seat_api, states):
        sync_client = SeatSyncClient(
            seat_api=seat_api,
            on_state_change=states.append,
            debounce_delay=0.5,
            reconnect_delay=RECONNECT,
        )
        async with sync_client:
            await sync_client.wait_synced()
            sync_client.edit(A3, 'Zed')

            await seat_api.end_stream()
            await wait_until(lambda: states[-1] is SyncState.SYNCED and len(states) == 3)

            assert seat_api.upsert_calls == []
            assert sync_client.display_value(A3) == 'Zed'

    @pytest.mark.asyncio
    async def test_retries_failed_connect_after_fixed_delay(self, sync_client, seat_api, states):
        seat_api.fail_snapshot_times = 2
        started = anyio.current_time()

        async with sync_client:
            with fail_after(1.0):
                await sync_client.wait_synced()
            elapsed = anyio.current_time() - started

        assert elapsed >= 2 * RECONNECT
        assert states[:2] == [SyncState.RECONNECTING, SyncState.SYNCED]
        assert seat_api.snapshot_calls == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error', [ValidationError('Bad request'), StorageError('500: database is locked')]
    )
    async def test_any_snapshot_error_leads_to_reconnect(
        self, sync_client, seat_api, states, error
    ):
        seat_api.fail_snapshot_times = 1
        seat_api.snapshot_error = error

        async with sync_client:
            with fail_after(1.0):
                await sync_client.wait_synced()

        assert states == [SyncState.RECONNECTING, SyncState.SYNCED, SyncState.TERMINATED]

    @pytest.mark.asyncio
    async def test_cannot_restart_after_close(self, sync_client):
        async with sync_client:
            await sync_client.wait_synced()

        assert sync_client.state is SyncState.TERMINATED
        with pytest.raises(RuntimeError):
            async with sync_client:
                pass


@pytest.mark.unit
class TestLocalEdits:
    @pytest.mark.asyncio
    async def test_edit_before_start_is_rejected(self, sync_client):
        with pytest.raises(RuntimeError):
            sync_client.edit(A3, 'Bob')

    @pytest.mark.asyncio
    async def test_burst_of_edits_sends_last_value_once(self, sync_client, seat_api):
        async with sync_client:
            await sync_client.wait_synced()

            for value in ('B', 'Bo', 'Bob'):
                sync_client.edit(A3, value)
            assert sync_client.display_value(A3) == 'Bob'

            await wait_until(lambda: seat_api.upsert_calls)
            await anyio.sleep(DEBOUNCE * 2)

            assert seat_api.upsert_calls == [(A3, 'Bob')]
            # Pending until the echo arrives
            assert sync_client.view.is_pending(A3)

            await seat_api.push_event(SeatRecord(key=A3, occupant_name='Bob'))
            await wait_until(lambda: not sync_client.view.is_pending(A3))
            assert sync_client.display_value(A3) == 'Bob'

    @pytest.mark.asyncio
    async def test_empty_value_frees_seat(self, sync_client, seat_api):
        async with sync_client:
            await sync_client.wait_synced()

            sync_client.edit(A3, '')
            await wait_until(lambda: seat_api.upsert_calls)

        assert seat_api.upsert_calls == [(A3, None)]

    @pytest.mark.asyncio
    async def test_edit_superseded_by_event_is_not_sent(
        self, sync_client, seat_api, log_messages
    ):
        async with sync_client:
            await sync_client.wait_synced()

            sync_client.edit(A3, 'Bob')
            await seat_api.push_event(SeatRecord(key=A3, occupant_name='Carol'))
            await wait_until(lambda: not sync_client.view.is_pending(A3))
            await anyio.sleep(DEBOUNCE * 2)

            assert seat_api.upsert_calls == []
            assert sync_client.display_value(A3) == 'Carol'
            assert any('superseded by a server update' in m for m in log_messages)

    @pytest.mark.asyncio
    @pytest.mark.parametrize('error', [StorageError('disk full'), ValidationError('bad seat')])
    async def test_failed_write_reverts_and_notifies(self, sync_client, seat_api, notes, error):
        seat_api.write_error = error
        async with sync_client:
            await sync_client.wait_synced()

            sync_client.edit(A3, 'Bob')
            await wait_until(lambda: notes)

            assert notes == [Notification.error('Failed to update seat A-3')]
            assert not sync_client.view.is_pending(A3)
            assert sync_client.display_value(A3) == 'Alice'
            assert sync_client.state is SyncState.SYNCED

    @pytest.mark.asyncio
    async def test_newer_edit_survives_failure_of_older_write(self, sync_client, seat_api, notes):
        seat_api.write_error = StorageError('disk full')
        seat_api.write_delay = DEBOUNCE * 2
        async with sync_client:
            await sync_client.wait_synced()

            sync_client.edit(A3, 'Bob')
            await wait_until(lambda: seat_api.upsert_calls)
            sync_client.edit(A3, 'Carol')
            await wait_until(lambda: notes)

            assert sync_client.display_value(A3) == 'Carol'

    @pytest.mark.asyncio
    async def test_clear_skips_debounce(self, sync_client, seat_api):
        async with sync_client:
            await sync_client.wait_synced()

            sync_client.edit(A3, 'Bob')
            sync_client.clear(A3)
            await wait_until(lambda: seat_api.clear_calls)
            await anyio.sleep(DEBOUNCE * 2)

            assert seat_api.clear_calls == [A3]
            assert seat_api.upsert_calls == []
            assert sync_client.display_value(A3) == ''


@pytest.mark.unit
class TestShutdown:
    @pytest.mark.asyncio
    async def test_close_cancels_pending_timers(self, sync_client, seat_api):
        async with sync_client:
            await sync_client.wait_synced()
            sync_client.edit(A3, 'Bob')

        await anyio.sleep(DEBOUNCE * 2)
        assert seat_api.upsert_calls == []

    @pytest.mark.asyncio
    async def test_close_waits_for_in_flight_write(self, sync_client, seat_api, notes):
        seat_api.write_delay = 0.2
        async with sync_client:
            await sync_client.wait_synced()
            sync_client.edit(A3, 'Bob')
            await wait_until(lambda: seat_api.upsert_calls)

        assert seat_api.completed_writes == 1
        assert notes == []

    @pytest.mark.asyncio
    async def test_edit_after_close_is_rejected(self, sync_client):
        async with sync_client:
            await sync_client.wait_synced()

        with pytest.raises(RuntimeError):
            sync_client.edit(A3, 'Bob')
