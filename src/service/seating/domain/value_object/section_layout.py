"""
Theater seating geometry.

Static table of sections, rows, blocks and seats per row. Seat numbers run
continuously along a row across its blocks in declaration order, so the
first seat of the second block continues from the last seat of the first.
"""

from typing import Dict, List, Tuple

import attrs

from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


@attrs.define(frozen=True)
class SectionLayout:
    """Rows of a section and, per block, how many seats each row holds."""

    name: str
    rows: Tuple[str, ...]
    blocks: Tuple[Tuple[str, Dict[str, int]], ...]

    def seat_keys(self) -> List[SeatKey]:
        keys: List[SeatKey] = []
        for row in self.rows:
            seat_counter = 1
            for block, seats_per_row in self.blocks:
                for _ in range(seats_per_row.get(row, 0)):
                    keys.append(
                        SeatKey(section=self.name, row=row, number=seat_counter, block=block)
                    )
                    seat_counter += 1
        return keys

    @property
    def block_names(self) -> Tuple[str, ...]:
        return tuple(block for block, _ in self.blocks)


def _per_row(rows: str, counts: Tuple[int, ...]) -> Dict[str, int]:
    return dict(zip(rows, counts, strict=True))


_GOLD_ROWS = 'ABCDEFGHIJKL'
_SILVER_ROWS = 'MNOPQRSTUVW'
_BRONZE_ROWS = 'ABCDEFG'

THEATER_LAYOUT: Tuple[SectionLayout, ...] = (
    SectionLayout(
        name='gold',
        rows=tuple(_GOLD_ROWS),
        blocks=(
            ('left', _per_row(_GOLD_ROWS, (15, 15, 16, 21, 22, 22, 23, 23, 23, 23, 23, 23))),
            ('center', _per_row(_GOLD_ROWS, (12, 12, 14, 16, 18, 18, 20, 21, 22, 22, 22, 23))),
            ('right', _per_row(_GOLD_ROWS, (16, 16, 16, 23, 23, 23, 23, 23, 23, 23, 23, 23))),
        ),
    ),
    SectionLayout(
        name='silver',
        rows=tuple(_SILVER_ROWS),
        blocks=(
            ('left', _per_row(_SILVER_ROWS, (21, 21, 20, 18, 16, 15, 13, 11, 8, 6, 3))),
            ('center', _per_row(_SILVER_ROWS, (11, 12, 12, 12, 13, 13, 14, 14, 14, 14, 6))),
            ('centeragain', _per_row(_SILVER_ROWS, (11, 12, 12, 12, 13, 13, 14, 14, 14, 14, 0))),
            ('right', _per_row(_SILVER_ROWS, (20, 20, 20, 20, 18, 16, 14, 12, 8, 6, 5))),
        ),
    ),
    SectionLayout(
        name='bronze',
        rows=tuple(_BRONZE_ROWS),
        blocks=(
            ('left', _per_row(_BRONZE_ROWS, (15, 14, 13, 12, 11, 8, 8))),
            ('center', _per_row(_BRONZE_ROWS, (25, 25, 25, 25, 25, 22, 14))),
            ('right', _per_row(_BRONZE_ROWS, (15, 14, 13, 12, 11, 8, 8))),
        ),
    ),
)


def generate_all_seats(
    layout: Tuple[SectionLayout, ...] = THEATER_LAYOUT,
) -> List[SeatKey]:
    """Every seat in the theater, ordered by section, row, block, number."""
    keys = [key for section in layout for key in section.seat_keys()]
    return sorted(keys, key=lambda k: (k.section, k.row, k.block, k.number))
