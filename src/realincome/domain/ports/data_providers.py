"""Data provider interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod

from realincome.domain.models.period import DateRange
from realincome.domain.models.series import Series
from realincome.domain.models.source import Country, SourceMode


class InflationDataProvider(ABC):
    """Abstract interface for sources of inflation time series."""

    mode: SourceMode

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of this data provider."""
        pass

    @abstractmethod
    async def fetch_series(self, country: str, date_range: DateRange) -> Series:
        """Fetch the series for ``country`` restricted to ``date_range``.

        Implementations guarantee that every datum the computation needs is present,
        raising ``MissingDataPoint`` otherwise.

        Raises:
            SourceUnavailable: Timeout, connection failure, or non-success status.
            InvalidResponse: Payload could not be parsed.
            MissingDataPoint: Source answered without a required observation.
        """
        pass

    @abstractmethod
    async def list_countries(self) -> list[Country]:
        """List countries known to the source, sorted by name."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
