"""Extract publishable fields from a conditions response."""

import logging

from .errors import StationMismatchError
from .schemas import WIND_DEGREES_UNSET, FieldName, NormalizedField, RawObservation

logger = logging.getLogger(__name__)


def parse_float(text: str) -> float | None:
    """Parse a provider number written as text.

    Returns None for anything that is not a plain decimal literal, so values
    like "0 mm", " 1.2" or "1_000" are rejected rather than coerced.
    """
    if not text or not text.isascii() or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_humidity(text: str) -> float | None:
    """Parse a percent-suffixed humidity such as "55%"."""
    if not text.endswith("%"):
        return None
    return parse_float(text[:-1])


def normalize(station_id: str, raw: RawObservation) -> list[NormalizedField]:
    """Validate a conditions response and return the fields worth publishing.

    Each optional field is checked on its own: one unusable value never keeps
    the others from being emitted. Temperature and wind speed have no validity
    gate, so the result is never empty.

    Args:
        station_id: Station the response was requested for.
        raw: Decoded provider response.

    Returns:
        Normalized fields in publish order.

    Raises:
        StationMismatchError: If the response belongs to another station.
    """
    if raw.station_id != station_id:
        raise StationMismatchError(station_id, raw.station_id)

    obs = raw.current_observation
    fields = [
        NormalizedField(FieldName.LATITUDE, obs.observation_location.latitude),
        NormalizedField(FieldName.LONGITUDE, obs.observation_location.longitude),
        NormalizedField(FieldName.TEMPERATURE, obs.temp_c),
    ]

    humidity = parse_humidity(obs.relative_humidity)
    if humidity is not None:
        fields.append(NormalizedField(FieldName.RELATIVE_HUMIDITY, humidity))
    else:
        logger.debug("%s: Skipping relative humidity %r", station_id, obs.relative_humidity)

    if obs.wind_degrees != WIND_DEGREES_UNSET:
        fields.append(NormalizedField(FieldName.WIND_DEGREES, obs.wind_degrees))
    else:
        logger.debug("%s: Wind direction not available", station_id)

    fields.append(NormalizedField(FieldName.WIND_SPEED, obs.wind_kph))
    fields.append(NormalizedField(FieldName.FEELS_LIKE, obs.feelslike_c))

    precipitation = parse_float(obs.precip_today_metric)
    if precipitation is not None:
        fields.append(NormalizedField(FieldName.PRECIPITATION, precipitation))
    else:
        logger.debug("%s: Skipping precipitation %r", station_id, obs.precip_today_metric)

    return fields

