"""
httpx implementation of the seat API client

Maps HTTP outcomes to the error kinds the sync client reacts to:
- 400 on a write -> ValidationError
- 404 on clear -> already free, not an error
- other 4xx / 5xx, any failed read, an unreadable body -> StorageError
- connection, timeout and protocol failures -> TransportError

The update stream uses a read timeout of twice the server heartbeat, so a
stalled connection surfaces as TransportError instead of hanging.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import httpx
import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import (
    CustomBaseError,
    StorageError,
    TransportError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.seat_sync_client.app.interface.i_seat_api import ISeatApi
from src.service.shared_kernel.app.seat_event_codec import SeatEventCodec
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


SEATS_PATH = '/api/seats'
UPDATES_PATH = '/api/seats/updates'


def _key_payload(key: SeatKey) -> dict[str, Any]:
    return {'section': key.section, 'row': key.row, 'number': key.number, 'block': key.block}


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = orjson.loads(response.content).get('detail')
    except (orjson.JSONDecodeError, AttributeError):
        detail = None
    return str(detail or response.reason_phrase or response.status_code)


class SeatApiClientImpl(ISeatApi):
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        stream_read_timeout: Optional[float] = None,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or settings.SEATING_API_BASE_URL,
            timeout=timeout or settings.CLIENT_REQUEST_TIMEOUT,
        )
        self.stream_read_timeout = stream_read_timeout or settings.SSE_HEARTBEAT_INTERVAL * 2

    async def __aenter__(self) -> 'SeatApiClientImpl':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _raise_for_status(response: httpx.Response, *, is_write: bool = True) -> None:
        if response.is_success:
            return
        detail = _error_detail(response)
        if is_write and response.status_code == httpx.codes.BAD_REQUEST:
            raise ValidationError(detail)
        raise StorageError(f'{response.status_code}: {detail}')

    @staticmethod
    def _seat_from_body(response: httpx.Response) -> SeatRecord:
        try:
            return SeatRecord.from_wire(orjson.loads(response.content)['seat'])
        except (CustomBaseError, KeyError, TypeError, AttributeError, orjson.JSONDecodeError) as e:
            raise StorageError(f'Malformed seat response: {type(e).__name__}: {e}') from e

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f'{method} {url} failed: {type(e).__name__}: {e}') from e

    @Logger.io(truncate_content=True)
    async def fetch_snapshot(self) -> List[SeatRecord]:
        response = await self._request('GET', SEATS_PATH)
        self._raise_for_status(response, is_write=False)
        try:
            return [SeatRecord.from_wire(item) for item in orjson.loads(response.content)]
        except (CustomBaseError, TypeError, AttributeError, orjson.JSONDecodeError) as e:
            raise StorageError(f'Malformed snapshot: {e}') from e

    @Logger.io
    async def upsert_seat(self, *, key: SeatKey, occupant_name: Optional[str]) -> SeatRecord:
        response = await self._request(
            'POST', SEATS_PATH, json=_key_payload(key) | {'name': occupant_name}
        )
        self._raise_for_status(response)
        return self._seat_from_body(response)

    @Logger.io
    async def clear_seat(self, *, key: SeatKey) -> SeatRecord:
        response = await self._request('DELETE', SEATS_PATH, json=_key_payload(key))
        if response.status_code == httpx.codes.NOT_FOUND:
            Logger.base.info(f'ℹ️ [SEAT_API] {key.seat_id} already free')
            return SeatRecord(key=key)
        self._raise_for_status(response)
        return self._seat_from_body(response)

    @asynccontextmanager
    async def open_stream(self) -> AsyncIterator[AsyncIterator[str]]:
        # At least one heartbeat must arrive per read window
        timeout = httpx.Timeout(self._client.timeout.connect, read=self.stream_read_timeout)
        try:
            async with self._client.stream(
                'GET', UPDATES_PATH, headers={'Accept': 'text/event-stream'}, timeout=timeout
            ) as response:
                if response.status_code != httpx.codes.OK:
                    raise TransportError(f'Event stream rejected: {response.status_code}')
                Logger.base.info('📡 [SEAT_API] Event stream open')
                yield self._iter_frames(response)
        except httpx.HTTPError as e:
            raise TransportError(f'Event stream failed: {type(e).__name__}: {e}') from e

    @staticmethod
    async def _iter_frames(response: httpx.Response) -> AsyncIterator[str]:
        async for line in response.aiter_lines():
            frame = SeatEventCodec.parse_sse_line(line)
            if frame is not None:
                yield frame
