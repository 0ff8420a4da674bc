"""Prometheus gauges mirroring the latest observation of each station."""

import logging

from prometheus_client import REGISTRY, CollectorRegistry, Gauge, start_http_server

from ..schemas import FieldName

logger = logging.getLogger(__name__)

AREA = "wunderground"
LABELS = ["sensor_name", "area"]

# field -> (metric name, help text)
GAUGE_DEFINITIONS: dict[FieldName, tuple[str, str]] = {
    FieldName.TEMPERATURE: (
        "thermometer_temperature_celsius",
        "Current temperature of the thermometer.",
    ),
    FieldName.RELATIVE_HUMIDITY: (
        "hygrometer_humidity_percent",
        "Current humidity of the hygrometer.",
    ),
    FieldName.PRECIPITATION: ("precipitation_mm", "Today's precipitation in mm."),
    FieldName.WIND_DEGREES: ("wind_direction_degrees", "Current wind direction in degrees"),
    FieldName.WIND_SPEED: ("wind_speed_kph", "Current wind speed in kph"),
}


class WeatherMetrics:
    """Gauge families keyed by (sensor_name, area).

    Values stay in the registry until the next successful cycle of the same
    station overwrites them.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        area: str = AREA,
    ) -> None:
        """Create and register the gauges.

        Args:
            registry: Registry to register with, defaults to the global one.
            area: Value of the `area` label on every sample.
        """
        self.registry = registry if registry is not None else REGISTRY
        self.area = area
        self._gauges: dict[FieldName, Gauge] = {
            field: Gauge(name, documentation, LABELS, registry=self.registry)
            for field, (name, documentation) in GAUGE_DEFINITIONS.items()
        }

    def set(self, field: FieldName, station_id: str, value: float) -> bool:
        """Overwrite the gauge for a field of a station.

        Returns:
            False if the field has no gauge, True otherwise.
        """
        gauge = self._gauges.get(field)
        if gauge is None:
            return False
        gauge.labels(sensor_name=station_id, area=self.area).set(float(value))
        return True

    def get(self, field: FieldName, station_id: str) -> float | None:
        """Current value of a gauge, or None if never set for the station."""
        name = GAUGE_DEFINITIONS[field][0]
        return self.registry.get_sample_value(
            name, {"sensor_name": station_id, "area": self.area}
        )


def start_metrics_server(
    port: int,
    addr: str = "",
    registry: CollectorRegistry | None = None,
) -> None:
    """Serve the registry for scraping at http://<addr>:<port>/metrics."""
    if registry is None:
        registry = REGISTRY
    start_http_server(port, addr=addr or "0.0.0.0", registry=registry)
    logger.info("Serving metrics on port %d", port)
