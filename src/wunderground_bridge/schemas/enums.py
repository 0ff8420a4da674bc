"""Enums for normalized observation fields."""

from enum import Enum


class FieldName(str, Enum):
    """Observation fields republished per station.

    The value of each member is the property segment of its MQTT topic.
    """

    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    TEMPERATURE = "temperature_degrees"
    RELATIVE_HUMIDITY = "relative_humidity_percent"
    WIND_DEGREES = "wind_degrees"
    WIND_SPEED = "wind_kph"
    FEELS_LIKE = "temperature_feels_like_degrees"
    PRECIPITATION = "precip_today_mm"
