"""Time periods and date ranges at monthly or annual granularity."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from functools import total_ordering

from pydantic import Field, model_validator

from realincome.domain.models.base import ValueObject


YEAR_MIN = 1
YEAR_MAX = 9999


class Granularity(str, Enum):
    """Resolution of the periods a data source publishes."""

    MONTHLY = "monthly"
    ANNUAL = "annual"


@total_ordering
class TimePoint(ValueObject):
    """A calendar month (year + month) or a calendar year (month omitted)."""

    year: int = Field(..., ge=YEAR_MIN, le=YEAR_MAX, description="Calendar year")
    month: int | None = Field(default=None, ge=1, le=12, description="Month 1-12, None for annual")

    @classmethod
    def monthly(cls, year: int, month: int) -> TimePoint:
        return cls(year=year, month=month)

    @classmethod
    def annual(cls, year: int) -> TimePoint:
        return cls(year=year)

    @property
    def granularity(self) -> Granularity:
        return Granularity.ANNUAL if self.month is None else Granularity.MONTHLY

    def next(self) -> TimePoint:
        """Return the period immediately following this one."""
        if self.month is None:
            return TimePoint(year=self.year + 1)
        if self.month == 12:
            return TimePoint(year=self.year + 1, month=1)
        return TimePoint(year=self.year, month=self.month + 1)

    def to_sdmx(self) -> str:
        """Render in SDMX period notation (``2024-M01`` or ``2024``)."""
        if self.month is None:
            return f"{self.year:04d}"
        return f"{self.year:04d}-M{self.month:02d}"

    def _sort_key(self) -> tuple[int, int]:
        return (self.year, self.month or 0)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TimePoint):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        if self.month is None:
            return f"{self.year:04d}"
        return f"{self.year:04d}-{self.month:02d}"


class DateRange(ValueObject):
    """Inclusive range of periods sharing one granularity."""

    start: TimePoint
    end: TimePoint

    @model_validator(mode="after")
    def _check_bounds(self) -> DateRange:
        if self.start.granularity != self.end.granularity:
            raise ValueError("start and end must share the same granularity")
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self

    @property
    def granularity(self) -> Granularity:
        return self.start.granularity

    def periods(self) -> Iterator[TimePoint]:
        """Yield every period from start to end, inclusive, in order."""
        current = self.start
        while current <= self.end:
            yield current
            current = current.next()

    def __contains__(self, period: object) -> bool:
        if not isinstance(period, TimePoint) or period.granularity != self.granularity:
            return False
        return self.start <= period <= self.end

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"
