"""
Seat Change Event

Published by the mutating endpoints after a successful write and fanned out
to every event stream subscriber, the writer included.
"""

import attrs

from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.enum.change_event_kind import ChangeEventKind


@attrs.define(frozen=True)
class SeatChangeEvent:
    record: SeatRecord
    kind: ChangeEventKind = ChangeEventKind.SEAT_UPDATE

    @property
    def is_clear(self) -> bool:
        return self.record.occupant_name is None

    @classmethod
    def seat_updated(cls, record: SeatRecord) -> 'SeatChangeEvent':
        return cls(record=record)

    @classmethod
    def seat_cleared(cls, record: SeatRecord) -> 'SeatChangeEvent':
        return cls(record=record.cleared())
