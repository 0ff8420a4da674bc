"""Weather observation schemas.

Pydantic models for provider responses and the normalized fields that are
republished to MQTT and Prometheus.
"""

from .enums import FieldName
from .observation import (
    WIND_DEGREES_UNSET,
    CurrentObservation,
    NormalizedField,
    ObservationLocation,
    RawObservation,
)

__all__ = [
    "CurrentObservation",
    "FieldName",
    "NormalizedField",
    "ObservationLocation",
    "RawObservation",
    "WIND_DEGREES_UNSET",
]
