"""Dependency injection container.

Wires settings, the series cache, both IMF providers, and the use cases. Tests and
library integrators can override any provider, e.g. swap the file-backed cache for
an in-memory one:

    container = Container()
    container.cache_backend.override(providers.Singleton(InMemoryCacheBackend))
"""

from dependency_injector import containers, providers

from realincome.application.use_cases.countries import ListCountriesUseCase
from realincome.application.use_cases.real_income import ComputeRealIncomeUseCase
from realincome.infrastructure.cache import CacheManager, LocalFileCacheBackend
from realincome.infrastructure.config import get_settings
from realincome.infrastructure.data_providers import (
    DataProviderRegistry,
    ImfDataMapperProvider,
    ImfSdmxCpiProvider,
)


class Container(containers.DeclarativeContainer):
    """Dependency injection container for real-income."""

    settings = providers.Callable(get_settings)

    # Cache
    cache_backend = providers.Singleton(
        LocalFileCacheBackend,
        cache_dir=settings.provided.cache_dir,
    )
    cache_manager = providers.Singleton(
        CacheManager,
        backend=cache_backend,
        enabled=settings.provided.cache_enabled,
    )

    # Data providers
    sdmx_provider = providers.Singleton(
        ImfSdmxCpiProvider,
        base_url=settings.provided.sdmx_base_url,
        structure_base_url=settings.provided.sdmx_structure_base_url,
        user_agent=settings.provided.sdmx_user_agent,
        timeout_seconds=settings.provided.timeout_seconds,
        max_retries=settings.provided.max_retries,
        retry_backoff_seconds=settings.provided.retry_backoff_seconds,
    )
    datamapper_provider = providers.Singleton(
        ImfDataMapperProvider,
        base_url=settings.provided.datamapper_base_url,
        user_agent=settings.provided.datamapper_user_agent,
        timeout_seconds=settings.provided.timeout_seconds,
        max_retries=settings.provided.max_retries,
        retry_backoff_seconds=settings.provided.retry_backoff_seconds,
    )
    provider_registry = providers.Singleton(
        DataProviderRegistry,
        providers=providers.List(sdmx_provider, datamapper_provider),
    )

    # Use cases
    compute_real_income_use_case = providers.Factory(
        ComputeRealIncomeUseCase,
        providers=provider_registry,
        cache=cache_manager,
        latest_policy=settings.provided.cpi_latest_policy,
    )
    list_countries_use_case = providers.Factory(
        ListCountriesUseCase,
        providers=provider_registry,
        cache_manager=cache_manager,
    )


_container: Container | None = None


def get_container() -> Container:
    """Get the process-wide container, creating it on first use."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    """Set a custom container (useful for testing)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    _container = None
