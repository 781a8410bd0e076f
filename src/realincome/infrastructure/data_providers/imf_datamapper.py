"""IMF DataMapper provider for annual inflation rates (PCPIPCH)."""

from __future__ import annotations

import math
from typing import Any

import structlog

from realincome.domain.exceptions import InvalidResponse
from realincome.domain.models.period import YEAR_MAX, YEAR_MIN, DateRange, TimePoint
from realincome.domain.models.series import Series, SeriesPoint
from realincome.domain.models.source import Country, SourceMode
from realincome.domain.services.computation import select_yearly_rates
from realincome.infrastructure.data_providers.base import HttpInflationDataProvider

logger = structlog.get_logger(__name__)

DATAMAPPER_INDICATOR = "PCPIPCH"  # inflation, average consumer prices, annual % change


def parse_datamapper_values(payload: Any, country: str, indicator: str = DATAMAPPER_INDICATOR) -> list[SeriesPoint]:
    """Extract yearly values from ``{"values": {indicator: {country: {"2024": 1.2}}}}``.

    A missing country yields an empty list; non-numeric values and unusable years
    are skipped.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("values"), dict):
        raise InvalidResponse("Unexpected DataMapper response (missing 'values')")

    by_indicator = payload["values"].get(indicator) or {}
    by_year = by_indicator.get(country) if isinstance(by_indicator, dict) else None
    if not isinstance(by_year, dict):
        logger.debug("No DataMapper values for country", indicator=indicator, country=country)
        return []

    points: list[SeriesPoint] = []
    for year_str, value in by_year.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        try:
            year = int(year_str)
        except ValueError:
            continue
        if not YEAR_MIN <= year <= YEAR_MAX or not math.isfinite(value):
            continue
        points.append(SeriesPoint(period=TimePoint.annual(year), value=float(value)))
    return points


def parse_datamapper_countries(payload: Any) -> list[Country]:
    """Extract countries from ``{"countries": {"ITA": {"label": "Italy"}}}``."""
    if not isinstance(payload, dict):
        raise InvalidResponse("Unexpected DataMapper countries response")
    table = payload.get("countries", payload)
    if not isinstance(table, dict):
        raise InvalidResponse("Unexpected DataMapper countries JSON shape")
    countries: list[Country] = []
    for code, info in table.items():
        label = info.get("label") if isinstance(info, dict) else None
        countries.append(Country(code=code, name=label or code))
    return countries


class ImfDataMapperProvider(HttpInflationDataProvider):
    """Annual CPI inflation rates from the IMF DataMapper API.

    The API answers bare clients with 403, so requests carry browser-like headers.
    """

    mode = SourceMode.DATAMAPPER

    def __init__(
        self,
        base_url: str = "https://www.imf.org/external/datamapper/api/v1",
        *,
        indicator: str = DATAMAPPER_INDICATOR,
        user_agent: str = "curl/8.5.0",
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_backoff_seconds: float = 0.5,
    ) -> None:
        super().__init__(
            base_url,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_backoff_seconds=retry_backoff_seconds,
            headers={
                "User-Agent": user_agent,
                "Accept": "application/json,text/plain,*/*",
                "Accept-Language": "en-US,en;q=0.9",
                "Referer": "https://www.imf.org/external/datamapper/",
            },
        )
        self._indicator = indicator

    def get_provider_name(self) -> str:
        return "imf_datamapper"

    async def fetch_series(self, country: str, date_range: DateRange) -> Series:
        self._check_granularity(date_range)
        path = f"/{self._indicator}/{country}"
        params = {"periods": ",".join(str(p.year) for p in date_range.periods())}
        logger.info(
            "Fetching inflation rates",
            provider=self.get_provider_name(),
            indicator=self._indicator,
            country=country,
            range=str(date_range),
        )

        resp = await self._request(path, params=params)
        if resp is None:
            raise InvalidResponse("Empty DataMapper response", path=path)
        points = parse_datamapper_values(self._json(resp, path), country, self._indicator)
        series = Series(mode=self.mode, country=country, points=tuple(points)).within(date_range)

        # Raises MissingDataPoint unless every year of the range has a value.
        select_yearly_rates(series, date_range)
        return series

    async def list_countries(self) -> list[Country]:
        resp = await self._request("/countries")
        if resp is None:
            raise InvalidResponse("Empty DataMapper countries response")
        countries = parse_datamapper_countries(self._json(resp, "/countries"))
        if not countries:
            raise InvalidResponse("DataMapper returned an empty country list")
        return sorted(countries, key=lambda c: c.name.lower())
