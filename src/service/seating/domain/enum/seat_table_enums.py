from enum import StrEnum


class OccupancyStatus(StrEnum):
    OCCUPIED = 'occupied'
    EMPTY = 'empty'


class SeatSortField(StrEnum):
    ROW = 'row'
    NUMBER = 'number'


class SortDirection(StrEnum):
    ASC = 'asc'
    DESC = 'desc'
