"""
Seat Key Value Object

Composite identity of a seat: (section, row, number, block).
The four parts together are the only identity a seat has, on the wire and in storage.
"""

from typing import Any, Optional

import attrs

from src.platform.exception.exceptions import ValidationError


@attrs.define(frozen=True)
class SeatKey:
    """Seat Key (Value Object)"""

    section: str
    row: str
    number: int
    block: str

    @property
    def seat_id(self) -> str:
        """Seat identifier, e.g. gold-A-3-left"""
        return f'{self.section}-{self.row}-{self.number}-{self.block}'

    @property
    def label(self) -> str:
        """Short label shown to viewers, e.g. A-3"""
        return f'{self.row}-{self.number}'

    @classmethod
    def create(
        cls,
        *,
        section: Optional[str],
        row: Optional[str],
        number: Optional[Any],
        block: Optional[str],
    ) -> 'SeatKey':
        """Build a key from raw request values, rejecting missing or malformed parts."""
        missing = [
            name
            for name, value in (('section', section), ('row', row), ('block', block))
            if value is None or not str(value).strip()
        ]
        if number is None:
            missing.append('number')
        if missing:
            raise ValidationError(f'Missing required fields: {", ".join(sorted(missing))}')

        return cls(
            section=str(section).strip(),
            row=str(row).strip(),
            number=_parse_seat_number(number),
            block=str(block).strip(),
        )


def _parse_seat_number(number: Any) -> int:
    """Positive integer from an int, an integral float or a digit string."""
    if isinstance(number, bool):
        raise ValidationError(f'Invalid seat number: {number!r}')
    if isinstance(number, float):
        if not number.is_integer():
            raise ValidationError(f'Invalid seat number: {number!r}')
        number = int(number)
    try:
        seat_number = int(number)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid seat number: {number!r}')
    if seat_number < 1:
        raise ValidationError(f'Invalid seat number: {number!r}')
    return seat_number
