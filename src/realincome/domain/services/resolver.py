"""Input resolution: period strings into date ranges, country codes into ISO3.

Monthly sources take ``YYYY-MM`` periods, annual sources take ``YYYY``. A string
that is well formed for the other granularity is reported as a granularity
mismatch rather than a format error so the caller can suggest switching modes.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from typing import NamedTuple

import structlog

from realincome.domain.exceptions import (
    GranularityMismatch,
    InvalidCountryCode,
    InvalidDateFormat,
    InvalidRange,
)
from realincome.domain.models.period import DateRange, Granularity, TimePoint

logger = structlog.get_logger(__name__)

MIN_YEAR = 1800
MAX_YEAR = 3000

_MONTHLY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
_ANNUAL_PATTERN = re.compile(r"^(\d{4})$")
_COUNTRY_PATTERN = re.compile(r"^[A-Z]{3}$")

_EXPECTED_FORMAT = {Granularity.MONTHLY: "YYYY-MM", Granularity.ANNUAL: "YYYY"}


def _check_year(year: int, text: str) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidDateFormat(
            f"Year out of range ({MIN_YEAR}-{MAX_YEAR}): {text!r}", value=text
        )


def parse_period(text: str, granularity: Granularity) -> TimePoint:
    """Parse one period string at the given granularity.

    Raises:
        GranularityMismatch: ``text`` is a valid period of the other granularity.
        InvalidDateFormat: ``text`` is not a period at all, or is out of range.
    """
    value = text.strip()
    monthly = _MONTHLY_PATTERN.match(value)
    annual = _ANNUAL_PATTERN.match(value)

    if granularity is Granularity.MONTHLY:
        if annual:
            raise GranularityMismatch(
                f"Expected YYYY-MM for a monthly source, got a bare year {value!r}", value=value
            )
        if not monthly:
            raise InvalidDateFormat(f"Expected YYYY-MM, got {value!r}", value=value)
        year, month = int(monthly.group(1)), int(monthly.group(2))
        if not 1 <= month <= 12:
            raise InvalidDateFormat(f"Month out of range in {value!r}", value=value)
        _check_year(year, value)
        return TimePoint.monthly(year, month)

    if monthly:
        raise GranularityMismatch(
            f"Expected YYYY for an annual source, got a month {value!r}", value=value
        )
    if not annual:
        raise InvalidDateFormat(f"Expected YYYY, got {value!r}", value=value)
    year = int(annual.group(1))
    _check_year(year, value)
    return TimePoint.annual(year)


def current_period(granularity: Granularity, today: date | None = None) -> TimePoint:
    """Return the period containing ``today`` (UTC now when omitted)."""
    today = today or datetime.now(UTC).date()
    if granularity is Granularity.MONTHLY:
        return TimePoint.monthly(today.year, today.month)
    return TimePoint.annual(today.year)


class ResolvedRange(NamedTuple):
    """A validated range plus whether its end was supplied by the caller.

    ``open_end`` is True when the end bound was omitted or clamped to the current
    period, i.e. the caller asked for "up to now" rather than a specific period.
    """

    date_range: DateRange
    open_end: bool


def resolve_range(
    start: str,
    end: str | None,
    granularity: Granularity,
    *,
    today: date | None = None,
) -> ResolvedRange:
    """Validate two period strings and build a DateRange.

    A missing ``end`` defaults to the current period; an ``end`` in the future is
    clamped to the current period. Both cases mark the range as open-ended.

    Raises:
        InvalidDateFormat, GranularityMismatch: Lexical problems with either bound.
        InvalidRange: ``start`` falls after ``end``.
    """
    start_point = parse_period(start, granularity)
    now = current_period(granularity, today)

    open_end = end is None or not end.strip()
    end_point = now if open_end else parse_period(end, granularity)

    if end_point > now:
        logger.info("Clamping end of range to current period", requested=str(end_point), clamped=str(now))
        end_point = now
        open_end = True

    if start_point > end_point:
        raise InvalidRange(
            f"Start {start_point} is after end {end_point}",
            start=str(start_point),
            end=str(end_point),
        )

    logger.debug(
        "Resolved date range",
        start=str(start_point),
        end=str(end_point),
        open_end=open_end,
        granularity=granularity.value,
        expected_format=_EXPECTED_FORMAT[granularity],
    )
    return ResolvedRange(DateRange(start=start_point, end=end_point), open_end)


def resolve_date_range(
    start: str,
    end: str | None,
    granularity: Granularity,
    *,
    today: date | None = None,
) -> DateRange:
    return resolve_range(start, end, granularity, today=today).date_range


def normalize_country_code(code: str) -> str:
    """Trim and upper-case an ISO-3166-1 alpha-3 code, validating its shape."""
    normalized = code.strip().upper()
    if not _COUNTRY_PATTERN.match(normalized):
        raise InvalidCountryCode(
            f"Country code must be three letters (ISO-3166-1 alpha-3), got {code!r}", value=code
        )
    return normalized
