"""Unit tests for the IMF SDMX CPI provider."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from realincome.domain.exceptions import InvalidResponse, MissingDataPoint
from realincome.domain.models.period import DateRange, TimePoint
from realincome.domain.models.source import SourceMode
from realincome.infrastructure.data_providers.imf_sdmx import (
    ImfSdmxCpiProvider,
    parse_sdmx_codelist,
    parse_sdmx_observations,
    parse_sdmx_period,
)

BASE_URL = "https://sdmx.example.com/2.1"
RANGE = DateRange(start=TimePoint.monthly(2024, 1), end=TimePoint.monthly(2025, 12))

STRUCTURE_SPECIFIC = b"""<?xml version="1.0" encoding="UTF-8"?>
<message:StructureSpecificData
    xmlns:message="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
    xmlns:ss="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/data/structurespecific">
  <message:DataSet ss:dataScope="DataStructure">
    <Series COUNTRY="ITA" INDEX_TYPE="CPI" COICOP_1999="_T" TYPE_OF_TRANSFORMATION="IX" FREQUENCY="M">
      <Obs TIME_PERIOD="2023-M12" OBS_VALUE="99.5"/>
      <Obs TIME_PERIOD="2024-M01" OBS_VALUE="100.0"/>
      <Obs TIME_PERIOD="2025-M06" OBS_VALUE="NaN"/>
      <Obs TIME_PERIOD="2025-M12" OBS_VALUE="110.0"/>
    </Series>
  </message:DataSet>
</message:StructureSpecificData>
"""

GENERIC = b"""<?xml version="1.0" encoding="UTF-8"?>
<message:GenericData
    xmlns:message="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
    xmlns:generic="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/data/generic">
  <message:DataSet>
    <generic:Series>
      <generic:Obs>
        <generic:ObsDimension value="2024-01"/>
        <generic:ObsValue value="100.0"/>
      </generic:Obs>
      <generic:Obs>
        <generic:ObsDimension value="bogus"/>
        <generic:ObsValue value="101.0"/>
      </generic:Obs>
    </generic:Series>
  </message:DataSet>
</message:GenericData>
"""

CODELIST = b"""<?xml version="1.0" encoding="UTF-8"?>
<mes:Structure
    xmlns:mes="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
    xmlns:str="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/structure"
    xmlns:com="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/common">
  <mes:Structures>
    <str:Codelists>
      <str:Codelist id="CL_COUNTRY_ISO3" agencyID="IMF">
        <com:Name xml:lang="en">Country</com:Name>
        <str:Code id="ITA">
          <com:Name xml:lang="fr">Italie</com:Name>
          <com:Name xml:lang="en">Italy</com:Name>
        </str:Code>
        <str:Code id="FRA">
          <com:Name xml:lang="en">France</com:Name>
        </str:Code>
        <str:Code id="XYZ"/>
      </str:Codelist>
    </str:Codelists>
  </mes:Structures>
</mes:Structure>
"""


def _provider(handler: Callable[[httpx.Request], httpx.Response]) -> ImfSdmxCpiProvider:
    provider = ImfSdmxCpiProvider(
        base_url=BASE_URL,
        structure_base_url="https://structure.example.com/rest",
        max_retries=0,
        retry_backoff_seconds=0,
    )
    provider._client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler), headers=provider._headers
    )
    return provider


@pytest.mark.unit
class TestSdmxParsing:
    def test_parse_period(self) -> None:
        assert parse_sdmx_period("2024-M01") == TimePoint.monthly(2024, 1)
        assert parse_sdmx_period("2024-07") == TimePoint.monthly(2024, 7)
        assert parse_sdmx_period("2024-M13") is None
        assert parse_sdmx_period("2024") is None
        assert parse_sdmx_period("0000-M01") is None

    def test_structure_specific_observations(self) -> None:
        points = parse_sdmx_observations(STRUCTURE_SPECIFIC)
        assert [(str(p.period), p.value) for p in points] == [
            ("2023-12", 99.5),
            ("2024-01", 100.0),
            ("2025-12", 110.0),
        ]

    def test_generic_observations(self) -> None:
        points = parse_sdmx_observations(GENERIC)
        assert [(str(p.period), p.value) for p in points] == [("2024-01", 100.0)]

    def test_invalid_xml(self) -> None:
        with pytest.raises(InvalidResponse):
            parse_sdmx_observations(b"<html><body>oops")

    def test_codelist_prefers_english(self) -> None:
        countries = {c.code: c.name for c in parse_sdmx_codelist(CODELIST)}
        assert countries == {"ITA": "Italy", "FRA": "France", "XYZ": "XYZ"}


@pytest.mark.unit
class TestImfSdmxCpiProvider:
    @pytest.mark.asyncio
    async def test_fetch_series_builds_request_and_trims_range(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=STRUCTURE_SPECIFIC)

        provider = _provider(handler)
        series = await provider.fetch_series("ITA", RANGE)

        assert seen[0].url.path == "/2.1/data/CPI/ITA.CPI._T.IX.M"
        assert seen[0].url.params["startPeriod"] == "2024-M01"
        assert seen[0].url.params["endPeriod"] == "2025-M12"
        assert seen[0].headers["user-agent"].startswith("real-income")
        assert series.mode is SourceMode.SDMX
        assert [str(p) for p in series.periods] == ["2024-01", "2025-12"]
        await provider.close()

    @pytest.mark.asyncio
    async def test_missing_start_observation(self) -> None:
        body = STRUCTURE_SPECIFIC.replace(b'TIME_PERIOD="2024-M01"', b'TIME_PERIOD="2024-M02"')
        provider = _provider(lambda request: httpx.Response(200, content=body))
        with pytest.raises(MissingDataPoint):
            await provider.fetch_series("ITA", RANGE)

    @pytest.mark.asyncio
    async def test_not_found_is_missing_data(self) -> None:
        provider = _provider(lambda request: httpx.Response(404, text="NoResultsFound"))
        with pytest.raises(MissingDataPoint):
            await provider.fetch_series("ITA", RANGE)

    @pytest.mark.asyncio
    async def test_end_month_not_yet_published_is_returned(self) -> None:
        body = STRUCTURE_SPECIFIC.replace(b'TIME_PERIOD="2025-M12"', b'TIME_PERIOD="2025-M09"')
        provider = _provider(lambda request: httpx.Response(200, content=body))
        series = await provider.fetch_series("ITA", RANGE)
        assert series.latest_at_or_before(RANGE.end).period == TimePoint.monthly(2025, 9)

    @pytest.mark.asyncio
    async def test_malformed_body(self) -> None:
        provider = _provider(lambda request: httpx.Response(200, content=b"not xml"))
        with pytest.raises(InvalidResponse):
            await provider.fetch_series("ITA", RANGE)

    @pytest.mark.asyncio
    async def test_list_countries_uses_structure_endpoint(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, content=CODELIST)

        provider = _provider(handler)
        countries = await provider.list_countries()

        assert seen == ["https://structure.example.com/rest/codelist/IMF/CL_COUNTRY_ISO3/latest"]
        assert [c.code for c in countries] == ["FRA", "ITA", "XYZ"]

    @pytest.mark.asyncio
    async def test_out_of_range_year_is_skipped(self) -> None:
        body = STRUCTURE_SPECIFIC.replace(b'TIME_PERIOD="2023-M12"', b'TIME_PERIOD="0000-M01"')
        provider = _provider(lambda request: httpx.Response(200, content=body))
        series = await provider.fetch_series("ITA", RANGE)
        assert [str(p) for p in series.periods] == ["2024-01", "2025-12"]
