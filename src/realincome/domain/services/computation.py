"""Real-income computation for both data source modes.

Pure functions over already-fetched series. Arithmetic is plain float64 with no
intermediate rounding; display rounding is left to the presentation layer.

Monthly index (SDMX)::

    real = nominal * (CPI_start / CPI_latest)

Annual rates (DataMapper, PCPIPCH)::

    deflator = prod_y (1 + rate_y / 100)
    real = nominal / deflator
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from realincome.domain.exceptions import DivisionByZero, InvalidRate, MissingDataPoint
from realincome.domain.models.computation import ComputationResult
from realincome.domain.models.period import DateRange
from realincome.domain.models.series import Series, SeriesPoint
from realincome.domain.models.source import LatestPeriodPolicy, SourceMode


def index_ratio(cpi_start: float, cpi_latest: float) -> float:
    """Return ``CPI_start / CPI_latest`` after guarding both index levels."""
    for label, value in (("start", cpi_start), ("latest", cpi_latest)):
        if not math.isfinite(value) or value <= 0:
            raise InvalidRate(f"CPI {label} index must be a positive number, got {value}", value=value)
    return cpi_start / cpi_latest


def deflator_from_rates(rates: Sequence[float]) -> float:
    """Chain yearly percentage rates into a cumulative price factor."""
    deflator = 1.0
    for rate in rates:
        if not math.isfinite(rate) or rate <= -100.0:
            raise InvalidRate(f"Inflation rate must be greater than -100%, got {rate}", value=rate)
        deflator *= 1.0 + rate / 100.0
    if not math.isfinite(deflator) or deflator <= 0.0:
        raise DivisionByZero(f"Deflator is not a positive finite number ({deflator})", value=deflator)
    return deflator


def select_index_points(
    series: Series,
    date_range: DateRange,
    policy: LatestPeriodPolicy = LatestPeriodPolicy.STRICT,
) -> tuple[SeriesPoint, SeriesPoint]:
    """Pick the start and latest observations of a monthly index series.

    Raises:
        MissingDataPoint: No observation at the start period, or none at the end
            period under the strict policy.
    """
    start_value = series.value_at(date_range.start)
    if start_value is None:
        raise MissingDataPoint(
            f"No CPI observation for start period {date_range.start}",
            country=series.country,
            period=str(date_range.start),
        )
    start = SeriesPoint(period=date_range.start, value=start_value)

    if policy is LatestPeriodPolicy.STRICT:
        end_value = series.value_at(date_range.end)
        if end_value is None:
            raise MissingDataPoint(
                f"No CPI observation for end period {date_range.end}",
                country=series.country,
                period=str(date_range.end),
            )
        return start, SeriesPoint(period=date_range.end, value=end_value)

    latest = series.latest_at_or_before(date_range.end) or start
    return start, latest


def select_yearly_rates(series: Series, date_range: DateRange) -> list[SeriesPoint]:
    """Return one rate per year of the range, in chronological order.

    Raises:
        MissingDataPoint: Any year of the range lacks a value.
    """
    rates: list[SeriesPoint] = []
    missing: list[str] = []
    for year in date_range.periods():
        value = series.value_at(year)
        if value is None:
            missing.append(str(year))
            continue
        rates.append(SeriesPoint(period=year, value=value))
    if missing:
        raise MissingDataPoint(
            f"No inflation rate for year(s) {', '.join(missing)}",
            country=series.country,
            periods=missing,
        )
    return rates


def compute_from_index(
    series: Series,
    date_range: DateRange,
    nominal_amount: float,
    policy: LatestPeriodPolicy = LatestPeriodPolicy.STRICT,
) -> ComputationResult:
    start, latest = select_index_points(series, date_range, policy)
    ratio = index_ratio(start.value, latest.value)
    return ComputationResult(
        mode=SourceMode.SDMX,
        country=series.country,
        date_range=date_range,
        nominal_amount=nominal_amount,
        real_amount=nominal_amount * ratio,
        ratio=ratio,
        deflator=latest.value / start.value,
        start_period=start.period,
        latest_period=latest.period,
        observations=(start, latest) if start.period != latest.period else (start,),
    )


def compute_from_rates(
    series: Series,
    date_range: DateRange,
    nominal_amount: float,
) -> ComputationResult:
    rates = select_yearly_rates(series, date_range)
    deflator = deflator_from_rates([p.value for p in rates])
    return ComputationResult(
        mode=SourceMode.DATAMAPPER,
        country=series.country,
        date_range=date_range,
        nominal_amount=nominal_amount,
        real_amount=nominal_amount / deflator,
        ratio=1.0 / deflator,
        deflator=deflator,
        start_period=rates[0].period,
        latest_period=rates[-1].period,
        observations=tuple(rates),
    )


def compute_real_income(
    series: Series,
    date_range: DateRange,
    nominal_amount: float,
    policy: LatestPeriodPolicy = LatestPeriodPolicy.STRICT,
) -> ComputationResult:
    """Dispatch to the computation matching the series' source mode."""
    if series.mode is SourceMode.SDMX:
        return compute_from_index(series, date_range, nominal_amount, policy)
    return compute_from_rates(series, date_range, nominal_amount)
