from collections.abc import AsyncGenerator
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sse_starlette.sse import EventSourceResponse

from src.platform.event.broadcast_hub import Subscription
from src.platform.logging.loguru_io import Logger
from src.service.seating.app.command.clear_seat_use_case import ClearSeatUseCase
from src.service.seating.app.command.upsert_seat_use_case import UpsertSeatUseCase
from src.service.seating.app.query.export_seat_table_use_case import ExportSeatTableUseCase
from src.service.seating.app.query.list_seat_table_use_case import ListSeatTableUseCase
from src.service.seating.app.query.list_seats_use_case import ListSeatsUseCase
from src.service.seating.app.query.stream_seat_updates_use_case import StreamSeatUpdatesUseCase
from src.service.seating.domain.enum.seat_table_enums import (
    OccupancyStatus,
    SeatSortField,
    SortDirection,
)
from src.service.seating.domain.value_object.seat_table_query import SeatTableQuery
from src.service.seating.driving_adapter.http_controller.schema.seat_schema import (
    SeatLocationRequest,
    SeatMutationResponse,
    SeatResponse,
    SeatTableResponse,
    SeatTableRowResponse,
    SeatUpsertRequest,
)


router = APIRouter()


def seat_table_query(
    section: Optional[str] = None,
    row: Optional[str] = None,
    block: Optional[str] = None,
    status: Optional[OccupancyStatus] = None,
    sort_field: SeatSortField = SeatSortField.ROW,
    sort_dir: SortDirection = SortDirection.ASC,
) -> SeatTableQuery:
    return SeatTableQuery(
        section=section,
        row=row,
        block=block,
        status=status,
        sort_field=sort_field,
        sort_dir=sort_dir,
    )


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def list_seats(
    use_case: ListSeatsUseCase = Depends(ListSeatsUseCase.depends),
) -> List[SeatResponse]:
    records = await use_case.get_all()
    return [SeatResponse.from_record(record) for record in records]


@router.post('', status_code=status.HTTP_200_OK)
@Logger.io
async def upsert_seat(
    request: SeatUpsertRequest,
    use_case: UpsertSeatUseCase = Depends(UpsertSeatUseCase.depends),
) -> SeatMutationResponse:
    record = await use_case.execute(
        section=request.section,
        row=request.row,
        number=request.number,
        block=request.block,
        occupant_name=request.name,
    )
    return SeatMutationResponse(success=True, seat=SeatResponse.from_record(record))


@router.delete('', status_code=status.HTTP_200_OK)
@Logger.io
async def clear_seat(
    request: SeatLocationRequest,
    use_case: ClearSeatUseCase = Depends(ClearSeatUseCase.depends),
) -> SeatMutationResponse:
    record = await use_case.execute(
        section=request.section,
        row=request.row,
        number=request.number,
        block=request.block,
    )
    return SeatMutationResponse(success=True, seat=SeatResponse.from_record(record))


@router.get('/updates', status_code=status.HTTP_200_OK)
async def stream_seat_updates(
    use_case: StreamSeatUpdatesUseCase = Depends(StreamSeatUpdatesUseCase.depends),
) -> EventSourceResponse:
    """SSE push of seat changes; keepalive on connect, then every hub heartbeat."""
    # Registered before the response headers go out
    subscription = await use_case.subscribe()

    async def event_generator(sub: Subscription) -> AsyncGenerator[dict, None]:
        async for frame in use_case.stream(subscription=sub):
            yield {'data': frame}

    return EventSourceResponse(event_generator(subscription))


@router.get('/table', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def list_seat_table(
    query: SeatTableQuery = Depends(seat_table_query),
    use_case: ListSeatTableUseCase = Depends(ListSeatTableUseCase.depends),
) -> SeatTableResponse:
    rows = await use_case.execute(query=query)
    return SeatTableResponse(
        total=len(rows),
        occupied=sum(1 for row in rows if row.is_occupied),
        seats=[SeatTableRowResponse.from_record(row) for row in rows],
    )


@router.get('/export', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def export_seat_table(
    query: SeatTableQuery = Depends(seat_table_query),
    use_case: ExportSeatTableUseCase = Depends(ExportSeatTableUseCase.depends),
) -> Response:
    exported = await use_case.execute(query=query)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={'Content-Disposition': f'attachment; filename="{exported.filename}"'},
    )
