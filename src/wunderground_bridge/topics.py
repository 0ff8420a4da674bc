"""MQTT topic naming."""

from .schemas import FieldName

DEFAULT_NAMESPACE = "weather_underground"


def topic(station_id: str, prop: FieldName | str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Build the topic for one property of one station.

    Example: ``weather_underground/stations/KCASANFR70/wind_kph``.
    """
    if isinstance(prop, FieldName):
        prop = prop.value
    return f"{namespace}/stations/{station_id}/{prop}"
