"""Unit test fixtures - mocks and sample data."""

from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from wunderground_bridge.outputs.metrics import WeatherMetrics
from wunderground_bridge.schemas import RawObservation


@pytest.fixture
def raw_observation(conditions_data: dict) -> RawObservation:
    """Decoded conditions response for KCASANFR70."""
    return RawObservation.model_validate(conditions_data)


@pytest.fixture
def make_observation(conditions_data: dict):
    """Build a RawObservation with some current_observation fields overridden."""

    def _make(**overrides) -> RawObservation:
        data = dict(conditions_data)
        data["current_observation"] = {**conditions_data["current_observation"], **overrides}
        return RawObservation.model_validate(data)

    return _make


@pytest.fixture
def registry() -> CollectorRegistry:
    """Private Prometheus registry so tests never share gauges."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> WeatherMetrics:
    """Weather gauges registered on the private registry."""
    return WeatherMetrics(registry=registry)


@pytest.fixture
def mock_bus() -> MagicMock:
    """Mock bus writer that accepts every message."""
    bus = MagicMock()
    bus.publish = MagicMock(return_value=True)
    return bus
