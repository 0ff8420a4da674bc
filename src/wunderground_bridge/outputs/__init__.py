"""Output sinks for normalized observations."""

from .fanout import FanoutPublisher
from .metrics import WeatherMetrics, start_metrics_server
from .mqtt_writer import MQTTWriter
from .protocols import BusWriter, MetricsSink

__all__ = [
    "BusWriter",
    "FanoutPublisher",
    "MetricsSink",
    "MQTTWriter",
    "WeatherMetrics",
    "start_metrics_server",
]
