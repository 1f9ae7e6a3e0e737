"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.event.broadcast_hub import InMemoryBroadcastHub
from src.service.seating.driven_adapter.broadcaster.seat_change_broadcaster_impl import (
    SeatChangeBroadcasterImpl,
)
from src.service.seating.driven_adapter.export.xlsx_seat_table_exporter import (
    XlsxSeatTableExporter,
)
from src.service.seating.driven_adapter.repo.seat_record_repo_impl import SeatRecordRepoImpl
from src.service.shared_kernel.app.seat_event_codec import KEEPALIVE_FRAME


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (engine is created lazily per event loop)
    database = providers.Singleton(
        Database,
        url=config_service.provided.DATABASE_URL_ASYNC,
        echo=config_service.provided.DB_ECHO,
    )

    # Broadcast hub - exactly one per process, owns every SSE subscriber
    broadcast_hub = providers.Singleton(
        InMemoryBroadcastHub,
        buffer_size=config_service.provided.SSE_SUBSCRIBER_BUFFER_SIZE,
        heartbeat_interval=config_service.provided.SSE_HEARTBEAT_INTERVAL,
        keepalive_message=KEEPALIVE_FRAME,
    )

    # Repositories (stateless - use session_factory per-request)
    seat_record_repo = providers.Singleton(
        SeatRecordRepoImpl, session_factory=database.provided.session
    )

    # Driven adapters
    seat_change_broadcaster = providers.Singleton(
        SeatChangeBroadcasterImpl, broadcast_hub=broadcast_hub
    )
    seat_table_exporter = providers.Singleton(XlsxSeatTableExporter)


container = Container()
