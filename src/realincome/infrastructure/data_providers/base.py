"""Shared HTTP plumbing for IMF data providers."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from realincome.domain.exceptions import GranularityMismatch, InvalidResponse, SourceUnavailable
from realincome.domain.models.period import DateRange
from realincome.domain.ports.data_providers import InflationDataProvider

logger = structlog.get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HttpInflationDataProvider(InflationDataProvider):
    """Base class owning a lazily created ``httpx.AsyncClient``.

    Requests are retried with exponential backoff on timeouts, connection errors,
    and retryable status codes. Anything still failing is raised as
    ``SourceUnavailable``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_backoff_seconds: float = 0.5,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._retry_backoff_seconds = retry_backoff_seconds
        self._headers = headers or {}
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_seconds,
                headers=self._headers,
                follow_redirects=True,
            )
        return self._client

    def _check_granularity(self, date_range: DateRange) -> None:
        expected = self.mode.granularity
        if date_range.granularity is not expected:
            raise GranularityMismatch(
                f"{self.get_provider_name()} needs a {expected.value} range, got {date_range.granularity.value}",
                range=str(date_range),
            )

    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        allow_not_found: bool = False,
    ) -> httpx.Response | None:
        """GET ``path`` with retries.

        Returns None for HTTP 404 when ``allow_not_found`` is set.
        """
        client = await self._get_client()
        provider = self.get_provider_name()
        last_error: SourceUnavailable | None = None

        for attempt in range(self._max_retries + 1):
            try:
                resp = await client.get(path, params=params)
            except httpx.TimeoutException as e:
                last_error = SourceUnavailable(
                    f"{provider} request timed out after {self._timeout_seconds}s", path=path
                )
                logger.warning("Request timed out", provider=provider, path=path, attempt=attempt + 1, error=str(e))
            except httpx.TransportError as e:
                last_error = SourceUnavailable(f"{provider} is unreachable: {e}", path=path)
                logger.warning(
                    "Transport error",
                    provider=provider,
                    path=path,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                status = resp.status_code
                if status == 404 and allow_not_found:
                    logger.debug("Source reported no results", provider=provider, path=path)
                    return None
                if resp.is_success:
                    logger.debug("Fetched", provider=provider, path=path, status_code=status, bytes=len(resp.content))
                    return resp
                last_error = SourceUnavailable(
                    f"{provider} returned HTTP {status}",
                    path=path,
                    status_code=status,
                    body=resp.text[:200] if resp.text else None,
                )
                if status not in RETRYABLE_STATUS_CODES:
                    raise last_error
                logger.warning("Retryable HTTP status", provider=provider, path=path, status_code=status, attempt=attempt + 1)

            if attempt < self._max_retries:
                await asyncio.sleep(self._retry_backoff_seconds * (2**attempt))

        raise last_error or SourceUnavailable(f"{provider} request failed", path=path)

    @staticmethod
    def _json(resp: httpx.Response, path: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise InvalidResponse(f"Response is not valid JSON: {e}", path=path) from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
