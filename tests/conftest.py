"""Shared test fixtures for all tests."""

import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "wunderground"


@pytest.fixture
def sample_station_id() -> str:
    """Sample Weather Underground PWS ID for testing."""
    return "KCASANFR70"


@pytest.fixture
def conditions_content() -> str:
    """Load conditions response fixture."""
    return (FIXTURES_DIR / "KCASANFR70.json").read_text()


@pytest.fixture
def conditions_data(conditions_content: str) -> dict:
    """Conditions response fixture as a dict, safe to modify per test."""
    return json.loads(conditions_content)
