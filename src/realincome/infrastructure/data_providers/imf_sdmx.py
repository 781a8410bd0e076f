"""IMF SDMX 2.1 provider for monthly CPI index levels.

Series key layout for the CPI dataset::

    /data/CPI/{COUNTRY}.{INDEX_TYPE}.{COICOP_1999}.{TRANSFORMATION}.{FREQUENCY}
    /data/CPI/ITA.CPI._T.IX.M?startPeriod=2024-M01&endPeriod=2025-M12

Responses are SDMX-ML. Observations come either as structure-specific
``<Obs TIME_PERIOD=".." OBS_VALUE=".."/>`` elements or as generic
``<Obs><ObsDimension value=".."/><ObsValue value=".."/></Obs>`` elements.
"""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET

import structlog

from realincome.domain.exceptions import InvalidResponse
from realincome.domain.models.period import YEAR_MAX, YEAR_MIN, DateRange, TimePoint
from realincome.domain.models.series import Series, SeriesPoint
from realincome.domain.models.source import Country, LatestPeriodPolicy, SourceMode
from realincome.domain.services.computation import select_index_points
from realincome.infrastructure.data_providers.base import HttpInflationDataProvider

logger = structlog.get_logger(__name__)

SDMX_CPI_DATASET = "CPI"
SDMX_CPI_INDEX_TYPE = "CPI"  # headline index family
SDMX_CPI_COICOP = "_T"  # all items
SDMX_CPI_TRANSFORMATION = "IX"  # index level
SDMX_CPI_FREQ = "M"
SDMX_COUNTRY_CODELIST = "CL_COUNTRY_ISO3"

_XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
_PERIOD_PATTERN = re.compile(r"^(\d{4})-M?(\d{1,2})$")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_sdmx_period(text: str) -> TimePoint | None:
    """Parse ``2024-M01`` (or ``2024-01``) into a monthly TimePoint."""
    match = _PERIOD_PATTERN.match(text.strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not YEAR_MIN <= year <= YEAR_MAX or not 1 <= month <= 12:
        return None
    return TimePoint.monthly(year, month)


def _parse_xml(content: bytes, what: str) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise InvalidResponse(f"Invalid SDMX XML in {what}: {e}") from e


def _obs_fields(obs: ET.Element) -> tuple[str | None, str | None]:
    period = obs.get("TIME_PERIOD")
    value = obs.get("OBS_VALUE")
    if period is not None and value is not None:
        return period, value
    for child in obs:
        name = _local_name(child.tag)
        if name == "ObsDimension" and period is None:
            period = child.get("value")
        elif name == "ObsValue" and value is None:
            value = child.get("value")
    return period, value


def parse_sdmx_observations(content: bytes) -> list[SeriesPoint]:
    """Extract (period, value) pairs from an SDMX-ML data message.

    Observations with an unparseable period or a non-finite value are skipped.
    """
    root = _parse_xml(content, "data message")
    points: list[SeriesPoint] = []
    skipped = 0
    for element in root.iter():
        if _local_name(element.tag) != "Obs":
            continue
        raw_period, raw_value = _obs_fields(element)
        period = parse_sdmx_period(raw_period) if raw_period else None
        try:
            value = float(raw_value) if raw_value is not None else math.nan
        except ValueError:
            value = math.nan
        if period is None or not math.isfinite(value):
            skipped += 1
            continue
        points.append(SeriesPoint(period=period, value=value))
    if skipped:
        logger.debug("Skipped unusable SDMX observations", skipped=skipped)
    return points


def parse_sdmx_codelist(content: bytes) -> list[Country]:
    """Extract countries from an SDMX-ML codelist, preferring English names."""
    root = _parse_xml(content, "codelist")
    countries: list[Country] = []
    for element in root.iter():
        if _local_name(element.tag) != "Code":
            continue
        code = element.get("id")
        if not code:
            continue
        name: str | None = None
        for child in element:
            if _local_name(child.tag) != "Name" or not child.text:
                continue
            if child.get(_XML_LANG, "").lower() == "en":
                name = child.text.strip()
                break
            if name is None:
                name = child.text.strip()
        countries.append(Country(code=code, name=name or code))
    return countries


class ImfSdmxCpiProvider(HttpInflationDataProvider):
    """Monthly CPI index levels from the IMF SDMX API."""

    mode = SourceMode.SDMX

    def __init__(
        self,
        base_url: str = "https://api.imf.org/external/sdmx/2.1",
        structure_base_url: str = "https://sdmxcentral.imf.org/ws/public/sdmxapi/rest",
        *,
        user_agent: str = "real-income (python httpx)",
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_backoff_seconds: float = 0.5,
    ) -> None:
        super().__init__(
            base_url,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_backoff_seconds=retry_backoff_seconds,
            headers={"User-Agent": user_agent},
        )
        self._structure_base_url = structure_base_url.rstrip("/")

    def get_provider_name(self) -> str:
        return "imf_sdmx"

    @staticmethod
    def series_key(country: str) -> str:
        return ".".join(
            (country, SDMX_CPI_INDEX_TYPE, SDMX_CPI_COICOP, SDMX_CPI_TRANSFORMATION, SDMX_CPI_FREQ)
        )

    async def fetch_series(self, country: str, date_range: DateRange) -> Series:
        self._check_granularity(date_range)
        path = f"/data/{SDMX_CPI_DATASET}/{self.series_key(country)}"
        params = {
            "startPeriod": date_range.start.to_sdmx(),
            "endPeriod": date_range.end.to_sdmx(),
        }
        logger.info("Fetching CPI index", provider=self.get_provider_name(), country=country, range=str(date_range))

        resp = await self._request(path, params=params, allow_not_found=True)
        points = parse_sdmx_observations(resp.content) if resp is not None else []
        series = Series(mode=self.mode, country=country, points=tuple(points)).within(date_range)

        # Raises MissingDataPoint when the start observation is absent. The end
        # observation is checked against the caller's latest-period policy at compute time.
        select_index_points(series, date_range, LatestPeriodPolicy.LATEST_AVAILABLE)
        return series

    async def list_countries(self) -> list[Country]:
        url = f"{self._structure_base_url}/codelist/IMF/{SDMX_COUNTRY_CODELIST}/latest"
        resp = await self._request(url)
        if resp is None:
            raise InvalidResponse("Empty SDMX codelist response")
        countries = parse_sdmx_codelist(resp.content)
        if not countries:
            raise InvalidResponse("Parsed 0 country codes from the SDMX codelist")
        return sorted(countries, key=lambda c: c.name.lower())
