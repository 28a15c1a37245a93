"""
Measurement collaborators for the card paginator.
"""

from .oracle import HeightMeasurer, MarkupRenderer, MeasurementOracle

__all__ = [
    "HeightMeasurer",
    "MarkupRenderer",
    "MeasurementOracle",
]
