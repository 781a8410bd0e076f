"""Ports implemented by the infrastructure layer."""

from realincome.domain.ports.cache import CacheBackend, SeriesCache
from realincome.domain.ports.data_providers import InflationDataProvider

__all__ = ["CacheBackend", "InflationDataProvider", "SeriesCache"]
