"""Data source identifiers and country metadata."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from realincome.domain.models.base import ValueObject
from realincome.domain.models.period import Granularity


class SourceMode(str, Enum):
    """Supported IMF data sources, keyed by CLI mode tag."""

    SDMX = "sdmx"
    DATAMAPPER = "datamapper"

    @property
    def granularity(self) -> Granularity:
        if self is SourceMode.SDMX:
            return Granularity.MONTHLY
        return Granularity.ANNUAL

    @property
    def label(self) -> str:
        if self is SourceMode.SDMX:
            return "IMF SDMX"
        return "IMF DataMapper"

    @property
    def indicator(self) -> str:
        if self is SourceMode.SDMX:
            return "CPI index level"
        return "PCPIPCH"


class LatestPeriodPolicy(str, Enum):
    """How the monthly index picks the end-of-range observation.

    ``strict`` requires an observation for the exact end period.
    ``latest_available`` accepts the latest observation at or before the end period.
    """

    STRICT = "strict"
    LATEST_AVAILABLE = "latest_available"


class Country(ValueObject):
    """A country as listed by a data source."""

    code: str = Field(..., description="ISO-3166-1 alpha-3 code")
    name: str = Field(..., description="Display name (English when available)")
