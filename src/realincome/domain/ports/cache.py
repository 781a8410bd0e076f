"""Cache interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from realincome.domain.models.cache import CacheKey
from realincome.domain.models.series import Series


class CacheBackend(ABC):
    """Raw text store addressed by name."""

    @abstractmethod
    def read(self, name: str) -> str | None:
        """Return the stored payload, or None when absent."""
        pass

    @abstractmethod
    def write(self, name: str, payload: str) -> None:
        """Replace the payload stored under ``name`` in a single step."""
        pass

    @abstractmethod
    def delete(self, name: str) -> bool:
        pass

    @abstractmethod
    def clear(self) -> int:
        """Remove every entry; return how many were removed."""
        pass


class SeriesCache(Protocol):
    """Read-through / write-through cache of fetched series."""

    def lookup(self, key: CacheKey) -> Series | None: ...

    def store(self, key: CacheKey, series: Series) -> None: ...
