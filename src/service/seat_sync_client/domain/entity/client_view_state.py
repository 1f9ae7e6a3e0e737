"""
Client View State

What one viewer knows about the seating chart:

- `authoritative`: last known server state, changed only by a snapshot load
  or a reconciled SeatChangeEvent; free seats are absent
- `pending`: optimistic local edits not yet echoed back by the event stream
  or superseded by a snapshot

A pending entry is removed when an event for its key is reconciled, when
the write for it fails, or when a snapshot arrives after its write finished.
It is never removed just because the write succeeded.
"""

from typing import Collection, Dict, Iterable, Optional

import attrs

from src.service.seat_sync_client.domain.value_object.notification import Notification
from src.service.shared_kernel.domain.domain_event.seat_change_event import SeatChangeEvent
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


@attrs.define
class ClientViewState:
    authoritative: Dict[SeatKey, str] = attrs.field(factory=dict)
    pending: Dict[SeatKey, str] = attrs.field(factory=dict)

    def load_snapshot(
        self, records: Iterable[SeatRecord], *, keep_pending: Collection[SeatKey] = ()
    ) -> None:
        """
        Replace the authoritative cache.

        Only pending edits listed in `keep_pending` (still waiting to be sent,
        or sent and not answered) stay on top of it. Any other pending entry
        was written already and its echo was lost with the old stream, so the
        snapshot holds the server's answer for it.
        """
        self.authoritative = {
            record.key: record.occupant_name
            for record in records
            if record.occupant_name is not None
        }
        self.pending = {key: value for key, value in self.pending.items() if key in keep_pending}

    def apply_local_edit(self, key: SeatKey, value: str) -> None:
        self.pending[key] = value

    def is_pending(self, key: SeatKey) -> bool:
        return key in self.pending

    def pending_value(self, key: SeatKey) -> Optional[str]:
        return self.pending.get(key)

    def drop_pending(self, key: SeatKey) -> None:
        self.pending.pop(key, None)

    def display_value(self, key: SeatKey) -> Optional[str]:
        if key in self.pending:
            return self.pending[key]
        return self.authoritative.get(key)

    def reconcile(self, event: SeatChangeEvent) -> Notification:
        """Apply a delivered event; the last delivered event for a key wins."""
        key = event.record.key
        if event.is_clear:
            self.authoritative.pop(key, None)
            action = 'cleared'
        else:
            self.authoritative[key] = event.record.occupant_name  # type: ignore[assignment]
            action = 'updated'
        self.pending.pop(key, None)
        return Notification.info(f'Seat {key.label} was {action}')
