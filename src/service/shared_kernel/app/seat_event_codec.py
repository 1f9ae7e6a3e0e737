"""
Seat Event Codec

Frame format of the seat update stream, shared by the SSE endpoint and the
sync client. Every frame is one SSE `data:` payload and is either the bare
keepalive marker or a JSON-encoded SeatChangeEvent:

    keepalive
    {"type": "SEAT_UPDATE", "seat": {"section": "gold", "row": "A", "number": 3, "block": "left", "name": "Alice"}}
"""

from typing import Any, Dict, Optional, Union

import orjson

from src.platform.exception.exceptions import CustomBaseError, MalformedEventError
from src.service.shared_kernel.domain.domain_event.seat_change_event import SeatChangeEvent
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.enum.change_event_kind import ChangeEventKind


KEEPALIVE_FRAME = 'keepalive'
SSE_DATA_PREFIX = 'data:'


class SeatEventCodec:
    @staticmethod
    def to_payload(event: SeatChangeEvent) -> Dict[str, Any]:
        return {'type': event.kind.value, 'seat': event.record.to_wire()}

    @staticmethod
    def encode(event: SeatChangeEvent) -> str:
        return orjson.dumps(SeatEventCodec.to_payload(event)).decode()

    @staticmethod
    def is_keepalive(frame: Union[str, bytes]) -> bool:
        if isinstance(frame, bytes):
            frame = frame.decode('utf-8', errors='replace')
        return frame.strip() == KEEPALIVE_FRAME

    @staticmethod
    def decode(frame: Union[str, bytes]) -> Optional[SeatChangeEvent]:
        """Decode one frame.

        Returns None for the keepalive marker. Anything that is not a
        well-formed SEAT_UPDATE raises MalformedEventError.
        """
        if SeatEventCodec.is_keepalive(frame):
            return None

        try:
            payload = orjson.loads(frame)
        except orjson.JSONDecodeError as e:
            raise MalformedEventError(f'Undecodable frame: {e}')

        if not isinstance(payload, dict):
            raise MalformedEventError(f'Frame is not an object: {type(payload).__name__}')

        kind = payload.get('type')
        if kind != ChangeEventKind.SEAT_UPDATE:
            raise MalformedEventError(f'Unknown event kind: {kind!r}')

        seat = payload.get('seat')
        if not isinstance(seat, dict):
            raise MalformedEventError('SEAT_UPDATE without seat payload')

        try:
            record = SeatRecord.from_wire(seat)
        except (CustomBaseError, TypeError) as e:
            raise MalformedEventError(f'Invalid seat payload: {e}')

        return SeatChangeEvent(record=record, kind=ChangeEventKind.SEAT_UPDATE)

    @staticmethod
    def parse_sse_line(line: str) -> Optional[str]:
        """Extract the frame from an SSE line; None for comments, fields and blanks."""
        if not line.startswith(SSE_DATA_PREFIX):
            return None
        data = line[len(SSE_DATA_PREFIX) :]
        return data[1:] if data.startswith(' ') else data
