from enum import StrEnum


class ChangeEventKind(StrEnum):
    """The only message kind carried on the seat update stream"""

    SEAT_UPDATE = 'SEAT_UPDATE'
