from typing import Any, Dict, Optional

import attrs

from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


@attrs.define(frozen=True)
class SeatRecord:
    """
    Occupancy of one seat.

    `occupant_name` None means the seat is free. Only the name changes over
    a record's lifetime, the key never does.
    """

    key: SeatKey
    occupant_name: Optional[str] = None

    @property
    def is_occupied(self) -> bool:
        return self.occupant_name is not None

    def cleared(self) -> 'SeatRecord':
        return attrs.evolve(self, occupant_name=None)

    def to_wire(self) -> Dict[str, Any]:
        return {
            'section': self.key.section,
            'row': self.key.row,
            'number': self.key.number,
            'block': self.key.block,
            'name': self.occupant_name,
        }

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> 'SeatRecord':
        key = SeatKey.create(
            section=data.get('section'),
            row=data.get('row'),
            number=data.get('number'),
            block=data.get('block'),
        )
        name = data.get('name')
        if name is not None and not isinstance(name, str):
            raise TypeError(f'name must be a string or null, got {type(name).__name__}')
        return cls(key=key, occupant_name=name or None)
