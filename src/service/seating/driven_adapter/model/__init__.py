"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.seating.driven_adapter.model.seat_model import SeatModel

__all__ = [
    'SeatModel',
]
