"""Producers that poll stations and publish their observations."""

from .base import BaseProducer
from .station import StationProducer

__all__ = ["BaseProducer", "StationProducer"]
