"""Unit tests for the real-income and country listing use cases."""

from __future__ import annotations

import pytest

from realincome.application.use_cases import (
    ComputeRealIncomeRequest,
    ComputeRealIncomeUseCase,
    ListCountriesUseCase,
)
from realincome.domain.exceptions import ErrorKind, GranularityMismatch, MissingDataPoint
from realincome.domain.models.period import DateRange, TimePoint
from realincome.domain.models.series import Series, SeriesPoint
from realincome.domain.models.source import Country, LatestPeriodPolicy, SourceMode
from realincome.domain.ports.data_providers import InflationDataProvider
from realincome.infrastructure.cache import CacheManager, InMemoryCacheBackend
from realincome.infrastructure.data_providers import DataProviderRegistry

MONTHLY_RANGE = DateRange(start=TimePoint.monthly(2024, 1), end=TimePoint.monthly(2025, 12))
ANNUAL_RANGE = DateRange(start=TimePoint.annual(2024), end=TimePoint.annual(2025))


class CountingProvider(InflationDataProvider):
    """Serves canned observations and counts fetches."""

    def __init__(self, mode: SourceMode, values: dict[TimePoint, float], error: Exception | None = None) -> None:
        self.mode = mode
        self._values = values
        self._error = error
        self.fetch_calls = 0
        self.list_calls = 0

    def get_provider_name(self) -> str:
        return f"counting_{self.mode.value}"

    async def fetch_series(self, country: str, date_range: DateRange) -> Series:
        self.fetch_calls += 1
        if self._error is not None:
            raise self._error
        points = tuple(SeriesPoint(period=p, value=v) for p, v in self._values.items())
        return Series(mode=self.mode, country=country, points=points).within(date_range)

    async def list_countries(self) -> list[Country]:
        self.list_calls += 1
        return [Country(code="ITA", name="Italy")]


@pytest.fixture
def sdmx_provider() -> CountingProvider:
    return CountingProvider(
        SourceMode.SDMX,
        {TimePoint.monthly(2024, 1): 100.0, TimePoint.monthly(2025, 12): 110.0},
    )


@pytest.fixture
def datamapper_provider() -> CountingProvider:
    return CountingProvider(
        SourceMode.DATAMAPPER,
        {TimePoint.annual(2024): 5.0, TimePoint.annual(2025): 3.0},
    )


@pytest.fixture
def cache_backend() -> InMemoryCacheBackend:
    return InMemoryCacheBackend()


@pytest.fixture
def use_case(
    sdmx_provider: CountingProvider,
    datamapper_provider: CountingProvider,
    cache_backend: InMemoryCacheBackend,
) -> ComputeRealIncomeUseCase:
    return ComputeRealIncomeUseCase(
        providers=DataProviderRegistry([sdmx_provider, datamapper_provider]),
        cache=CacheManager(cache_backend),
    )


@pytest.mark.unit
class TestComputeRealIncomeUseCase:
    @pytest.mark.asyncio
    async def test_monthly_index(self, use_case: ComputeRealIncomeUseCase) -> None:
        result = await use_case.compute(SourceMode.SDMX, "ita", MONTHLY_RANGE, 10000.0)
        assert result.country == "ITA"
        assert result.real_amount == pytest.approx(9090.91, abs=1e-2)

    @pytest.mark.asyncio
    async def test_annual_rates(self, use_case: ComputeRealIncomeUseCase) -> None:
        result = await use_case.compute(SourceMode.DATAMAPPER, "ITA", ANNUAL_RANGE, 10000.0)
        assert result.deflator == pytest.approx(1.0815)
        assert result.real_amount == pytest.approx(9246.42, abs=1e-2)

    @pytest.mark.asyncio
    async def test_warm_cache_skips_fetch(
        self,
        use_case: ComputeRealIncomeUseCase,
        sdmx_provider: CountingProvider,
        cache_backend: InMemoryCacheBackend,
    ) -> None:
        first = await use_case.compute(SourceMode.SDMX, "ITA", MONTHLY_RANGE, 10000.0)
        second = await use_case.compute(SourceMode.SDMX, "ITA", MONTHLY_RANGE, 10000.0)

        assert first == second
        assert sdmx_provider.fetch_calls == 1
        assert len(cache_backend) == 1

    @pytest.mark.asyncio
    async def test_cache_bypass(
        self,
        use_case: ComputeRealIncomeUseCase,
        datamapper_provider: CountingProvider,
        cache_backend: InMemoryCacheBackend,
    ) -> None:
        await use_case.compute(SourceMode.DATAMAPPER, "ITA", ANNUAL_RANGE, 1.0, use_cache=False)
        await use_case.compute(SourceMode.DATAMAPPER, "ITA", ANNUAL_RANGE, 1.0, use_cache=False)

        assert datamapper_provider.fetch_calls == 2
        assert len(cache_backend) == 0

    @pytest.mark.asyncio
    async def test_failed_fetch_is_not_cached(self, cache_backend: InMemoryCacheBackend) -> None:
        provider = CountingProvider(SourceMode.SDMX, {}, error=MissingDataPoint("no data"))
        use_case = ComputeRealIncomeUseCase(DataProviderRegistry([provider]), CacheManager(cache_backend))

        for _ in range(2):
            with pytest.raises(MissingDataPoint):
                await use_case.compute(SourceMode.SDMX, "ITA", MONTHLY_RANGE, 1.0)

        assert provider.fetch_calls == 2
        assert len(cache_backend) == 0

    @pytest.mark.asyncio
    async def test_range_granularity_must_match_mode(self, use_case: ComputeRealIncomeUseCase) -> None:
        with pytest.raises(GranularityMismatch):
            await use_case.compute(SourceMode.SDMX, "ITA", ANNUAL_RANGE, 1.0)

    @pytest.mark.asyncio
    async def test_latest_available_policy(self, cache_backend: InMemoryCacheBackend) -> None:
        provider = CountingProvider(
            SourceMode.SDMX,
            {TimePoint.monthly(2024, 1): 100.0, TimePoint.monthly(2025, 8): 104.0},
        )
        use_case = ComputeRealIncomeUseCase(
            DataProviderRegistry([provider]),
            CacheManager(cache_backend),
            latest_policy=LatestPeriodPolicy.LATEST_AVAILABLE,
        )
        result = await use_case.compute(SourceMode.SDMX, "ITA", MONTHLY_RANGE, 104.0)
        assert result.latest_period == TimePoint.monthly(2025, 8)
        assert result.real_amount == pytest.approx(100.0)

    @pytest.mark.asyncio
    async def test_open_end_uses_latest_published_month(self, cache_backend: InMemoryCacheBackend) -> None:
        provider = CountingProvider(
            SourceMode.SDMX,
            {TimePoint.monthly(2024, 1): 100.0, TimePoint.monthly(2025, 1): 104.0},
        )
        use_case = ComputeRealIncomeUseCase(DataProviderRegistry([provider]), CacheManager(cache_backend))

        response = await use_case.execute(
            ComputeRealIncomeRequest(mode=SourceMode.SDMX, country="ITA", start="2024-01", nominal_amount=10400)
        )

        assert response.success is True, response.error
        assert response.result is not None
        assert response.result.latest_period == TimePoint.monthly(2025, 1)
        assert response.result.real_amount == pytest.approx(10000.0)

    @pytest.mark.asyncio
    async def test_explicit_end_stays_strict(self, cache_backend: InMemoryCacheBackend) -> None:
        provider = CountingProvider(
            SourceMode.SDMX,
            {TimePoint.monthly(2024, 1): 100.0, TimePoint.monthly(2025, 1): 104.0},
        )
        use_case = ComputeRealIncomeUseCase(DataProviderRegistry([provider]), CacheManager(cache_backend))

        response = await use_case.execute(
            ComputeRealIncomeRequest(
                mode=SourceMode.SDMX, country="ITA", start="2024-01", end="2025-06", nominal_amount=1
            )
        )

        assert response.error_kind is ErrorKind.MISSING_DATA_POINT

    @pytest.mark.asyncio
    async def test_execute_success(self, use_case: ComputeRealIncomeUseCase) -> None:
        response = await use_case.execute(
            ComputeRealIncomeRequest(
                mode=SourceMode.DATAMAPPER, country="ITA", start="2024", end="2025", nominal_amount=10000
            )
        )
        assert response.success is True
        assert response.result is not None
        assert response.error is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "mode, start, end, kind",
        [
            (SourceMode.SDMX, "2024-13", "2025-01", ErrorKind.INVALID_DATE_FORMAT),
            (SourceMode.SDMX, "2024", "2025", ErrorKind.GRANULARITY_MISMATCH),
            (SourceMode.DATAMAPPER, "2025", "2024", ErrorKind.INVALID_RANGE),
            (SourceMode.DATAMAPPER, "2020", "2021", ErrorKind.MISSING_DATA_POINT),
        ],
    )
    async def test_execute_reports_error_kind(
        self,
        use_case: ComputeRealIncomeUseCase,
        mode: SourceMode,
        start: str,
        end: str,
        kind: ErrorKind,
    ) -> None:
        response = await use_case.execute(
            ComputeRealIncomeRequest(mode=mode, country="ITA", start=start, end=end, nominal_amount=100)
        )
        assert response.success is False
        assert response.result is None
        assert response.error_kind is kind
        assert response.error

    @pytest.mark.asyncio
    async def test_execute_invalid_country(self, use_case: ComputeRealIncomeUseCase) -> None:
        response = await use_case.execute(
            ComputeRealIncomeRequest(mode=SourceMode.DATAMAPPER, country="IT", start="2024", end="2025", nominal_amount=1)
        )
        assert response.error_kind is ErrorKind.INVALID_COUNTRY_CODE

    def test_request_rejects_non_positive_amount(self) -> None:
        with pytest.raises(ValueError):
            ComputeRealIncomeRequest(mode=SourceMode.SDMX, country="ITA", start="2024-01", nominal_amount=0)


@pytest.mark.unit
class TestListCountriesUseCase:
    @pytest.mark.asyncio
    async def test_country_list_is_cached(self, sdmx_provider: CountingProvider) -> None:
        use_case = ListCountriesUseCase(DataProviderRegistry([sdmx_provider]), CacheManager(InMemoryCacheBackend()))

        first = await use_case.execute(SourceMode.SDMX)
        second = await use_case.execute(SourceMode.SDMX)

        assert first == second == [Country(code="ITA", name="Italy")]
        assert sdmx_provider.list_calls == 1

    @pytest.mark.asyncio
    async def test_bypass_cache(self, sdmx_provider: CountingProvider) -> None:
        use_case = ListCountriesUseCase(DataProviderRegistry([sdmx_provider]), CacheManager(InMemoryCacheBackend()))
        await use_case.execute(SourceMode.SDMX, use_cache=False)
        await use_case.execute(SourceMode.SDMX, use_cache=False)
        assert sdmx_provider.list_calls == 2
