"""
Catalog Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.catalog.driven_adapter.model.trip_model import (
    PriceTierModel,
    TripModel,
    TripScheduleModel,
)

__all__ = ['PriceTierModel', 'TripModel', 'TripScheduleModel']
