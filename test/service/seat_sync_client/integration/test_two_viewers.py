"""
Two viewers of one theater, wired to the real use cases and broadcast hub

One viewer edits a seat; the other is notified and shows the new occupant.
"""

from typing import List

from anyio import fail_after
import pytest

from src.platform.event.broadcast_hub import InMemoryBroadcastHub
from src.service.seat_sync_client.app.seat_sync_client import SeatSyncClient
from src.service.seat_sync_client.domain.value_object.notification import Notification
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey
from test.fakes import InMemorySeatRecordRepo, InProcessSeatApi, wait_until


A3 = SeatKey(section='gold', row='A', number=3, block='left')


def make_viewer(
    seat_repo: InMemorySeatRecordRepo, hub: InMemoryBroadcastHub, notes: List[Notification]
) -> SeatSyncClient:
    return SeatSyncClient(
        seat_api=InProcessSeatApi(seat_repo=seat_repo, broadcast_hub=hub),
        notifier=notes.append,
        debounce_delay=0.05,
        reconnect_delay=0.05,
    )


class TestTwoViewers:
    @pytest.mark.asyncio
    async def test_edit_reaches_other_viewer(self, seat_repo, broadcast_hub):
        notes_1: List[Notification] = []
        notes_2: List[Notification] = []

        async with (
            make_viewer(seat_repo, broadcast_hub, notes_1) as viewer_1,
            make_viewer(seat_repo, broadcast_hub, notes_2) as viewer_2,
        ):
            with fail_after(1.0):
                await viewer_1.wait_synced()
                await viewer_2.wait_synced()
            assert broadcast_hub.subscriber_count == 2

            viewer_1.edit(A3, 'Alice')
            # Optimistic: visible to the writer before any round trip
            assert viewer_1.display_value(A3) == 'Alice'
            await wait_until(lambda: viewer_2.display_value(A3) == 'Alice')
            # The writer's own echo settles its pending edit
            await wait_until(lambda: not viewer_1.view.is_pending(A3))

            assert viewer_1.seat_api.upsert_calls == 1
            assert notes_2 == [Notification.info('Seat A-3 was updated')]
            assert notes_1 == [Notification.info('Seat A-3 was updated')]

            viewer_2.clear(A3)
            await wait_until(lambda: viewer_1.display_value(A3) is None)

        assert broadcast_hub.subscriber_count == 0
        assert seat_repo.records == {}

    @pytest.mark.asyncio
    async def test_late_viewer_starts_from_snapshot(self, seat_repo, broadcast_hub):
        notes: List[Notification] = []
        await seat_repo.upsert(key=A3, occupant_name='Alice')

        async with make_viewer(seat_repo, broadcast_hub, notes) as viewer:
            await viewer.wait_synced()

            assert viewer.display_value(A3) == 'Alice'
            assert notes == []
