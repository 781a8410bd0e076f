"""Cache storage backends."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog

from realincome.domain.ports.cache import CacheBackend

logger = structlog.get_logger(__name__)


def _check_name(name: str) -> str:
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise ValueError(f"Invalid cache entry name: {name!r}")
    return name


class LocalFileCacheBackend(CacheBackend):
    """One file per entry under ``cache_dir``.

    Writes go to a temporary file in the same directory and are moved into place
    with ``os.replace``, so readers see either the old entry or the new one.
    """

    def __init__(self, cache_dir: Path | str) -> None:
        self._cache_dir = Path(cache_dir).expanduser()

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def _path(self, name: str) -> Path:
        return self._cache_dir / _check_name(name)

    def read(self, name: str) -> str | None:
        try:
            return self._path(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, name: str, payload: str) -> None:
        target = self._path(name)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=self._cache_dir,
            prefix=f".{name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = f.name
            try:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            except BaseException:
                f.close()
                os.unlink(temp_path)
                raise
        try:
            os.replace(temp_path, target)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
        logger.debug("Cache entry written", path=str(target), bytes=len(payload))

    def delete(self, name: str) -> bool:
        try:
            self._path(name).unlink()
            return True
        except FileNotFoundError:
            return False

    def clear(self) -> int:
        if not self._cache_dir.exists():
            return 0
        removed = 0
        for path in self._cache_dir.glob("*.json"):
            path.unlink(missing_ok=True)
            removed += 1
        # Leftovers of writers that died before os.replace.
        orphans = list(self._cache_dir.glob(".*.tmp"))
        for path in orphans:
            path.unlink(missing_ok=True)
        if orphans:
            logger.debug("Removed orphaned temporary files", count=len(orphans))
        return removed


class InMemoryCacheBackend(CacheBackend):
    """Process-local backend, mainly for tests and library embedding."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def read(self, name: str) -> str | None:
        return self._entries.get(_check_name(name))

    def write(self, name: str, payload: str) -> None:
        self._entries[_check_name(name)] = payload

    def delete(self, name: str) -> bool:
        return self._entries.pop(_check_name(name), None) is not None

    def clear(self) -> int:
        removed = len(self._entries)
        self._entries.clear()
        return removed

    def __len__(self) -> int:
        return len(self._entries)
