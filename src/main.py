"""
Production FastAPI Application

Seat API, seat update stream and the broadcast hub heartbeat.

Run with:
    granian src.main:app --interface asgi --host 0.0.0.0 --port 8000 --workers 1

One worker only: the broadcast hub lives in process memory.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Seating Service] Starting up...')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Seating Service] Dependency injection wired')

    # Create tables if they don't exist
    database = container.database()
    await database.create_tables()
    Logger.base.info('🗄️  [Seating Service] Database tables ready')

    broadcast_hub = container.broadcast_hub()

    # Task group for background tasks (hub heartbeat)
    async with anyio.create_task_group() as tg:
        tg.start_soon(broadcast_hub.run_heartbeat)
        Logger.base.info('✅ [Seating Service] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Seating Service] Shutting down...')
        tg.cancel_scope.cancel()

    # Ends every open SSE response
    await broadcast_hub.close()
    Logger.base.info('📡 [Seating Service] Broadcast hub closed')

    await database.dispose()
    Logger.base.info('🗄️  [Seating Service] Database engine disposed')

    # Unwire DI
    container.unwire()

    Logger.base.info('👋 [Seating Service] Shutdown complete')


# Create FastAPI app using shared factory
app = create_app(lifespan=lifespan)
