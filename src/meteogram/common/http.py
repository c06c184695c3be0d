"""Async HTTP client for the Open-Meteo endpoints, with retry."""

from __future__ import annotations

import logging

import httpx
from tenacity import before_sleep_log, retry, retry_if_exception, stop_after_attempt, wait_exponential

from meteogram.config import get_settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def _is_retryable(exc: BaseException) -> bool:
    """Retry on transient HTTP errors and timeouts."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return False


def _error_reason(resp: httpx.Response) -> str | None:
    # Open-Meteo reports bad requests as {"error": true, "reason": "..."}
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        reason = body.get("reason")
        return str(reason) if reason else None
    return None


def raise_for_status(resp: httpx.Response) -> None:
    """Like ``Response.raise_for_status`` but carrying Open-Meteo's reason."""
    if resp.is_success:
        return
    reason = _error_reason(resp)
    message = f"HTTP {resp.status_code} for {resp.request.url}"
    if reason:
        message = f"{message}: {reason}"
    raise httpx.HTTPStatusError(message, request=resp.request, response=resp)


class HttpClient:
    """Async HTTP client with retry logic.

    Each GET is retried up to ``max_attempts`` times on timeouts and
    429/5xx responses; the last error is re-raised.
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        max_attempts: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers or {},
            timeout=httpx.Timeout(settings.http_timeout),
            transport=transport,
        )
        self._get_with_retry = retry(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(max_attempts or settings.http_max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )(self._get_once)

    async def _get_once(self, url: str, params: dict | None) -> httpx.Response:
        resp = await self._client.get(url, params=params)
        raise_for_status(resp)
        return resp

    async def get(self, url: str, params: dict | None = None) -> httpx.Response:
        return await self._get_with_retry(url, params)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
