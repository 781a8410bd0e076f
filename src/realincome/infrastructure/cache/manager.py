"""Series cache on top of a storage backend."""

from __future__ import annotations

import structlog
from pydantic import ValidationError

from realincome.domain.models.cache import CacheEntry, CacheKey, CountryListEntry
from realincome.domain.models.series import Series
from realincome.domain.models.source import Country, SourceMode
from realincome.domain.ports.cache import CacheBackend

logger = structlog.get_logger(__name__)


class CacheManager:
    """Read-through / write-through cache of fetched series and country lists.

    Entries never expire: index levels and rates for closed periods do not change.
    Unreadable or corrupted entries are reported as misses so the caller refetches.
    When disabled, every lookup misses and every store is a no-op.
    """

    def __init__(self, backend: CacheBackend, enabled: bool = True) -> None:
        self._backend = backend
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def _read(self, name: str) -> str | None:
        try:
            return self._backend.read(name)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cache entry unreadable, treating as miss", entry=name, error=str(e))
            return None

    def _write(self, name: str, payload: str) -> None:
        try:
            self._backend.write(name, payload)
        except OSError as e:
            logger.warning("Failed to persist cache entry", entry=name, error=str(e))

    def get_entry(self, key: CacheKey) -> CacheEntry | None:
        if not self._enabled:
            return None
        name = key.filename()
        payload = self._read(name)
        if payload is None:
            logger.debug("Cache miss", key=key.serialize())
            return None
        try:
            entry = CacheEntry.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(
                "Corrupted cache entry, treating as miss",
                key=key.serialize(),
                error_count=e.error_count(),
            )
            return None
        if entry.key != key:
            logger.warning("Cache entry key mismatch, treating as miss", key=key.serialize())
            return None
        logger.debug("Cache hit", key=key.serialize(), fetched_at=entry.fetched_at.isoformat())
        return entry

    def lookup(self, key: CacheKey) -> Series | None:
        entry = self.get_entry(key)
        return entry.series if entry is not None else None

    def store(self, key: CacheKey, series: Series) -> None:
        if not self._enabled:
            return
        entry = CacheEntry(key=key, series=series)
        self._write(key.filename(), entry.model_dump_json())
        logger.debug("Cache store", key=key.serialize(), points=len(series.points))

    def invalidate(self, key: CacheKey) -> bool:
        return self._backend.delete(key.filename())

    def clear(self) -> int:
        return self._backend.clear()

    # Country lists -------------------------------------------------

    @staticmethod
    def _countries_name(mode: SourceMode) -> str:
        return f"countries_{mode.value}.json"

    def lookup_countries(self, mode: SourceMode) -> list[Country] | None:
        if not self._enabled:
            return None
        payload = self._read(self._countries_name(mode))
        if payload is None:
            return None
        try:
            entry = CountryListEntry.model_validate_json(payload)
        except ValidationError:
            logger.warning("Corrupted country list in cache, treating as miss", mode=mode.value)
            return None
        if entry.mode is not mode or not entry.countries:
            return None
        return list(entry.countries)

    def store_countries(self, mode: SourceMode, countries: list[Country]) -> None:
        if not self._enabled:
            return
        entry = CountryListEntry(mode=mode, countries=tuple(countries))
        self._write(self._countries_name(mode), entry.model_dump_json())
