"""Time-series domain models."""

from __future__ import annotations

from pydantic import Field, field_validator

from realincome.domain.models.base import ValueObject
from realincome.domain.models.period import DateRange, TimePoint
from realincome.domain.models.source import SourceMode


class SeriesPoint(ValueObject):
    """Value object representing one observation of a series."""

    period: TimePoint = Field(..., description="Observation period")
    value: float = Field(..., description="Index level (sdmx) or percentage rate (datamapper)")


class Series(ValueObject):
    """Chronologically ordered observations for one country and source."""

    mode: SourceMode
    country: str
    points: tuple[SeriesPoint, ...] = Field(default_factory=tuple)

    @field_validator("points")
    @classmethod
    def _sort_points(cls, points: tuple[SeriesPoint, ...]) -> tuple[SeriesPoint, ...]:
        # Later duplicates win, matching the order the source emitted them.
        by_period = {p.period: p for p in points}
        return tuple(sorted(by_period.values(), key=lambda p: p.period))

    @property
    def periods(self) -> list[TimePoint]:
        return [p.period for p in self.points]

    def is_empty(self) -> bool:
        return not self.points

    def value_at(self, period: TimePoint) -> float | None:
        for point in self.points:
            if point.period == period:
                return point.value
        return None

    def latest_at_or_before(self, period: TimePoint) -> SeriesPoint | None:
        latest: SeriesPoint | None = None
        for point in self.points:
            if point.period > period:
                break
            latest = point
        return latest

    def within(self, date_range: DateRange) -> Series:
        """Return the sub-series whose periods fall inside ``date_range``."""
        return self.model_copy(
            update={"points": tuple(p for p in self.points if p.period in date_range)}
        )
