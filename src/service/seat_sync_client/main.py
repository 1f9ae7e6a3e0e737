"""
Seat Sync Client - headless viewer

Connects to the seat API, stays in sync and logs every notification.
Run with: python -m src.service.seat_sync_client.main
"""

import anyio

from src.platform.logging.loguru_io import Logger
from src.service.seat_sync_client.app.seat_sync_client import SeatSyncClient
from src.service.seat_sync_client.driven_adapter.seat_api_client_impl import SeatApiClientImpl


async def run_viewer() -> None:
    async with SeatApiClientImpl() as seat_api, SeatSyncClient(seat_api=seat_api) as client:
        await client.wait_synced()
        Logger.base.info(
            f'👀 [VIEWER] Synced with {len(client.view.authoritative)} occupied seats'
        )
        await anyio.sleep_forever()


if __name__ == '__main__':
    try:
        anyio.run(run_viewer)
    except KeyboardInterrupt:
        Logger.base.info('🛑 [VIEWER] Stopped by user')
