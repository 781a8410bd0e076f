"""Domain models for real-income."""

from realincome.domain.models.cache import CacheEntry, CacheKey, CountryListEntry
from realincome.domain.models.computation import ComputationResult
from realincome.domain.models.period import DateRange, Granularity, TimePoint
from realincome.domain.models.series import Series, SeriesPoint
from realincome.domain.models.source import Country, LatestPeriodPolicy, SourceMode

__all__ = [
    "CacheEntry",
    "CacheKey",
    "ComputationResult",
    "Country",
    "CountryListEntry",
    "DateRange",
    "Granularity",
    "LatestPeriodPolicy",
    "Series",
    "SeriesPoint",
    "SourceMode",
    "TimePoint",
]
