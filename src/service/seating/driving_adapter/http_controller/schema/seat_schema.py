from typing import List, Optional, Union

from pydantic import BaseModel

from src.service.shared_kernel.domain.entity.seat_record import SeatRecord


class SeatLocationRequest(BaseModel):
    # Identity parts are optional here so that a missing part is reported
    # as "Missing required fields" by the domain, not as a schema error
    section: Optional[str] = None
    row: Optional[str] = None
    number: Optional[Union[int, str]] = None
    block: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {'section': 'gold', 'row': 'A', 'number': 3, 'block': 'left'}
        }


class SeatUpsertRequest(SeatLocationRequest):
    name: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'section': 'gold',
                'row': 'A',
                'number': 3,
                'block': 'left',
                'name': 'Alice',
            }
        }


class SeatResponse(BaseModel):
    section: str
    row: str
    number: int
    block: str
    name: Optional[str] = None

    @classmethod
    def from_record(cls, record: SeatRecord) -> 'SeatResponse':
        return cls(**record.to_wire())


class SeatMutationResponse(BaseModel):
    success: bool
    seat: SeatResponse


class SeatTableRowResponse(SeatResponse):
    status: str

    @classmethod
    def from_record(cls, record: SeatRecord) -> 'SeatTableRowResponse':
        return cls(**record.to_wire(), status='occupied' if record.is_occupied else 'empty')


class SeatTableResponse(BaseModel):
    total: int
    occupied: int
    seats: List[SeatTableRowResponse]
