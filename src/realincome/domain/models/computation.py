"""Computation result models."""

from __future__ import annotations

from pydantic import Field

from realincome.domain.models.base import ValueObject
from realincome.domain.models.period import DateRange, TimePoint
from realincome.domain.models.series import SeriesPoint
from realincome.domain.models.source import SourceMode


class ComputationResult(ValueObject):
    """Outcome of converting a nominal amount into a real amount."""

    mode: SourceMode = Field(..., description="Data source used")
    country: str = Field(..., description="ISO3 country code")
    date_range: DateRange = Field(..., description="Requested range")
    nominal_amount: float = Field(..., description="Unadjusted amount")
    real_amount: float = Field(..., description="Amount in start-of-range purchasing power")
    ratio: float = Field(..., description="Factor applied to the nominal amount (real / nominal)")
    deflator: float = Field(
        ..., description="Cumulative price growth over the range (CPI_latest / CPI_start or product of rates)"
    )
    start_period: TimePoint = Field(..., description="First period used")
    latest_period: TimePoint = Field(..., description="Last period used")
    observations: tuple[SeriesPoint, ...] = Field(
        default_factory=tuple, description="Index levels or yearly rates that entered the computation"
    )

    @property
    def loss(self) -> float:
        """Purchasing power lost, in nominal currency units."""
        return self.nominal_amount - self.real_amount

    @property
    def loss_pct(self) -> float:
        return (1.0 - self.ratio) * 100.0
