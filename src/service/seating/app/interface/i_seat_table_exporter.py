from abc import ABC, abstractmethod
from typing import List

from src.service.shared_kernel.domain.entity.seat_record import SeatRecord


class ISeatTableExporter(ABC):
    """Renders seat table rows into a downloadable document"""

    media_type: str
    file_extension: str

    @abstractmethod
    def export(self, rows: List[SeatRecord]) -> bytes:
        pass
