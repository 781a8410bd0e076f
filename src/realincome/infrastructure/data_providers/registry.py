"""Lookup of data providers by source mode."""

from __future__ import annotations

from collections.abc import Iterable

from realincome.domain.models.source import SourceMode
from realincome.domain.ports.data_providers import InflationDataProvider


class DataProviderRegistry:
    """Maps each ``SourceMode`` to the provider serving it."""

    def __init__(self, providers: Iterable[InflationDataProvider]) -> None:
        self._providers: dict[SourceMode, InflationDataProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: InflationDataProvider) -> None:
        self._providers[provider.mode] = provider

    def get(self, mode: SourceMode) -> InflationDataProvider:
        try:
            return self._providers[mode]
        except KeyError:
            raise ValueError(
                f"No data provider registered for mode '{mode.value}'. "
                f"Registered: {', '.join(m.value for m in self._providers)}"
            ) from None

    def modes(self) -> list[SourceMode]:
        return list(self._providers)

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()
