"""Country listing use case."""

from __future__ import annotations

import structlog

from realincome.domain.models.source import Country, SourceMode
from realincome.infrastructure.cache.manager import CacheManager
from realincome.infrastructure.data_providers.registry import DataProviderRegistry

logger = structlog.get_logger(__name__)


class ListCountriesUseCase:
    """Lists the countries a data source covers, going through the cache."""

    def __init__(self, providers: DataProviderRegistry, cache_manager: CacheManager) -> None:
        self._providers = providers
        self._cache_manager = cache_manager

    async def execute(self, mode: SourceMode, use_cache: bool = True) -> list[Country]:
        if use_cache:
            cached = self._cache_manager.lookup_countries(mode)
            if cached:
                logger.debug("Using cached country list", mode=mode.value, count=len(cached))
                return cached

        countries = await self._providers.get(mode).list_countries()
        if use_cache:
            self._cache_manager.store_countries(mode, countries)
        return countries
