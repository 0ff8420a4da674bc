"""Protocols for the sinks observations are fanned out to."""

from typing import Protocol

from ..schemas import FieldName

Payload = float | int | str


class BusWriter(Protocol):
    """Protocol for publish/subscribe writers."""

    def publish(self, topic: str, payload: Payload) -> bool:
        """Publish a retained message. Returns False if it could not be queued."""
        ...


class MetricsSink(Protocol):
    """Protocol for the shared gauge registry."""

    def set(self, field: FieldName, station_id: str, value: float) -> bool:
        """Set the gauge for a field. Returns False if the field has no gauge."""
        ...
