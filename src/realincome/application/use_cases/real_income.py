"""Real-income use case: resolve, fetch (through the cache), compute."""

from __future__ import annotations

import structlog
from pydantic import BaseModel, Field

from realincome.domain.exceptions import ErrorKind, GranularityMismatch, RealIncomeError
from realincome.domain.models.cache import CacheKey
from realincome.domain.models.computation import ComputationResult
from realincome.domain.models.period import DateRange
from realincome.domain.models.source import LatestPeriodPolicy, SourceMode
from realincome.domain.ports.cache import SeriesCache
from realincome.domain.services.computation import compute_real_income
from realincome.domain.services.resolver import normalize_country_code, resolve_range
from realincome.infrastructure.data_providers.registry import DataProviderRegistry

logger = structlog.get_logger(__name__)


class ComputeRealIncomeRequest(BaseModel):
    """Request to convert a nominal amount into a real amount."""

    mode: SourceMode = Field(..., description="Data source")
    country: str = Field(..., description="ISO3 country code")
    start: str = Field(..., description="Start period (YYYY-MM for sdmx, YYYY for datamapper)")
    end: str | None = Field(default=None, description="End period; defaults to the current period")
    nominal_amount: float = Field(..., gt=0, allow_inf_nan=False, description="Nominal amount")
    use_cache: bool = Field(default=True, description="Read and write the series cache")


class ComputeRealIncomeResponse(BaseModel):
    """Outcome of a real-income computation, successful or not."""

    success: bool = Field(..., description="Whether the computation succeeded")
    result: ComputationResult | None = Field(default=None, description="Result when successful")
    error_kind: ErrorKind | None = Field(default=None, description="Failure class when unsuccessful")
    error: str | None = Field(default=None, description="Error message if the computation failed")


class ComputeRealIncomeUseCase:
    """Orchestrates one computation.

    ResolveRange -> CacheLookup -> (hit: Compute) | (miss: Fetch -> CacheStore -> Compute).
    Every failure is terminal; nothing is retried at this layer.
    """

    def __init__(
        self,
        providers: DataProviderRegistry,
        cache: SeriesCache,
        latest_policy: LatestPeriodPolicy = LatestPeriodPolicy.STRICT,
    ) -> None:
        self._providers = providers
        self._cache = cache
        self._latest_policy = latest_policy

    async def compute(
        self,
        mode: SourceMode,
        country: str,
        date_range: DateRange,
        nominal_amount: float,
        use_cache: bool = True,
        open_end: bool = False,
    ) -> ComputationResult:
        """Compute the real amount for an already resolved range.

        An ``open_end`` range (end omitted or clamped to the current period) uses the
        latest available index level; explicit ends follow the configured policy.

        Raises:
            RealIncomeError: Any typed failure (see ``ErrorKind``).
        """
        if date_range.granularity is not mode.granularity:
            raise GranularityMismatch(
                f"Mode '{mode.value}' needs a {mode.granularity.value} range, got {date_range.granularity.value}",
                range=str(date_range),
            )
        country = normalize_country_code(country)
        key = CacheKey(mode=mode, country=country, date_range=date_range)
        log = logger.bind(mode=mode.value, country=country, range=str(date_range))

        series = self._cache.lookup(key) if use_cache else None
        if series is not None:
            log.debug("Using cached series", points=len(series.points))
        else:
            provider = self._providers.get(mode)
            series = await provider.fetch_series(country, date_range)
            log.info("Fetched series", provider=provider.get_provider_name(), points=len(series.points))
            if use_cache:
                self._cache.store(key, series)

        policy = LatestPeriodPolicy.LATEST_AVAILABLE if open_end else self._latest_policy
        return compute_real_income(series, date_range, nominal_amount, policy)

    async def execute(self, request: ComputeRealIncomeRequest) -> ComputeRealIncomeResponse:
        try:
            resolved = resolve_range(request.start, request.end, request.mode.granularity)
            result = await self.compute(
                request.mode,
                request.country,
                resolved.date_range,
                request.nominal_amount,
                use_cache=request.use_cache,
                open_end=resolved.open_end,
            )
        except RealIncomeError as e:
            logger.info("Real income computation failed", error_kind=e.kind.value, error=e.message)
            return ComputeRealIncomeResponse(success=False, error_kind=e.kind, error=e.message)
        return ComputeRealIncomeResponse(success=True, result=result)
