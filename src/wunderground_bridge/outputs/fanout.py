"""Fan-out of normalized fields to MQTT and Prometheus."""

import logging
from typing import Iterable

from ..schemas import FieldName, NormalizedField
from ..topics import DEFAULT_NAMESPACE, topic
from .protocols import BusWriter, MetricsSink

logger = logging.getLogger(__name__)


class FanoutPublisher:
    """Routes each field of an observation to the bus and, if mapped, a gauge.

    Bus and metric writes are independent: a failed publish never suppresses
    the gauge update or the remaining fields.
    """

    def __init__(
        self,
        bus: BusWriter,
        metrics: MetricsSink,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        """Initialize fan-out publisher.

        Args:
            bus: Writer for retained messages.
            metrics: Shared gauge registry.
            namespace: First segment of every topic.
        """
        self.bus = bus
        self.metrics = metrics
        self.namespace = namespace

    def publish(self, station_id: str, fields: Iterable[NormalizedField]) -> None:
        """Publish all fields of one station's observation.

        Args:
            station_id: Station the fields belong to.
            fields: Validated fields from a single fetch cycle.
        """
        published = 0
        failed = 0
        for field in fields:
            if self.bus.publish(topic(station_id, field.name, self.namespace), field.value):
                published += 1
            else:
                failed += 1

            if field.is_numeric:
                self.metrics.set(field.name, station_id, field.value)  # type: ignore[arg-type]

            if field.name is FieldName.TEMPERATURE:
                logger.info("%s: %.1f C", station_id, field.value)

        if failed:
            logger.warning(
                "%s: %d of %d messages not published", station_id, failed, published + failed
            )
        else:
            logger.debug("%s: Published %d messages", station_id, published)
