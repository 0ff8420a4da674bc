"""HTTP clients for weather data providers."""

from .wunderground import WundergroundClient

__all__ = ["WundergroundClient"]
