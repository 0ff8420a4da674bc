"""Schemas for Weather Underground conditions responses and normalized fields."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

from .enums import FieldName

# Provider value for "wind direction not available"
WIND_DEGREES_UNSET = -9999


class ObservationLocation(BaseModel):
    """Location block of a current observation."""

    latitude: str = ""
    longitude: str = ""


class CurrentObservation(BaseModel):
    """The `current_observation` block of a conditions response.

    Only the fields that get republished are modelled; anything else in the
    payload is ignored.
    """

    observation_location: ObservationLocation = ObservationLocation()
    station_id: str
    temp_c: float = Field(strict=True)
    relative_humidity: str = ""  # e.g. "55%"
    wind_degrees: int = Field(strict=True)
    wind_kph: float = Field(strict=True)
    feelslike_c: str = ""
    precip_today_metric: str = ""


class RawObservation(BaseModel):
    """Conditions response for a personal weather station.

    Lives for a single fetch cycle and is never persisted.
    """

    current_observation: CurrentObservation

    @property
    def station_id(self) -> str:
        """Station identifier embedded in the response."""
        return self.current_observation.station_id


@dataclass(frozen=True)
class NormalizedField:
    """A single validated field ready to be published."""

    name: FieldName
    value: float | int | str

    @property
    def is_numeric(self) -> bool:
        """Whether the value is a number rather than text."""
        return not isinstance(self.value, str)
