"""Weather Underground bridge - republish station observations to MQTT and Prometheus.

Each configured personal weather station is polled on a fixed interval. Valid
fields of its current observation are published as retained MQTT messages
(one topic per station and property) and mirrored into Prometheus gauges:

- temperature, humidity, wind direction, wind speed and precipitation as gauges
- location and feels-like temperature on MQTT only

Usage:
    from wunderground_bridge.normalizer import normalize
    from wunderground_bridge.producers import StationProducer
    from wunderground_bridge.topics import topic
"""

__version__ = "0.1.0"

from .config import Settings, get_settings
from .errors import BusConnectionError, FetchError, FetchErrorKind, StationMismatchError
from .normalizer import normalize
from .schemas import FieldName, NormalizedField, RawObservation
from .topics import topic

__all__ = [
    "BusConnectionError",
    "FetchError",
    "FetchErrorKind",
    "FieldName",
    "NormalizedField",
    "RawObservation",
    "Settings",
    "StationMismatchError",
    "get_settings",
    "normalize",
    "topic",
]
