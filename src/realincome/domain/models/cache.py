"""Cache key and persisted cache entry models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from realincome.domain.models.base import ValueObject
from realincome.domain.models.period import DateRange
from realincome.domain.models.series import Series
from realincome.domain.models.source import Country, SourceMode


class CacheKey(ValueObject):
    """Identifies one cached series: (mode, country, range)."""

    mode: SourceMode
    country: str
    date_range: DateRange

    def serialize(self) -> str:
        return f"{self.mode.value}:{self.country}:{self.date_range.start}:{self.date_range.end}"

    def filename(self) -> str:
        """File-system safe rendering of the key."""
        return self.serialize().replace(":", "_") + ".json"


class CacheEntry(ValueObject):
    """A persisted series together with the time it was fetched."""

    key: CacheKey
    series: Series
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CountryListEntry(ValueObject):
    """A persisted country list for one data source."""

    mode: SourceMode
    countries: tuple[Country, ...]
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
