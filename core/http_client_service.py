# core/http_client_service.py
"""Perform HTTP I/O against the hosted Postgres REST API.

This module provides a small HTTP layer used by the data access functions. It
centralizes concurrency limits, retry behavior, and response handling so call
sites do not re-implement network concerns.

Notes:
    - Requests are concurrency-limited via a semaphore.
    - Retries are applied for transient failures and server/rate-limit responses.
    - Clients are created by the caller and passed in explicitly; there is no
      module-level singleton.
"""

import asyncio
from typing import Any

import httpx
import structlog

import config

logger = structlog.get_logger(__name__)


def _safe_to_resend(error: httpx.HTTPError | None) -> bool:
    """Return whether a failed request is known not to have been acted on."""
    if isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout)):
        return True
    return isinstance(error, httpx.HTTPStatusError) and error.response.status_code == 429


class HTTPClientService:
    """Perform concurrency-limited HTTP requests with retries."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_concurrency: int | None = None,
    ):
        """Initialize the HTTP client.

        Args:
            timeout: Request timeout in seconds. Defaults to `config.HTTPX_TIMEOUT`.
            transport: Optional transport, e.g. `httpx.MockTransport` in tests.
            max_concurrency: In-flight request limit. Defaults to
                `config.MAX_CONCURRENT_REQUESTS`.
        """
        effective_timeout = timeout if timeout is not None else config.HTTPX_TIMEOUT
        concurrency = max_concurrency if max_concurrency is not None else config.MAX_CONCURRENT_REQUESTS
        self._client = httpx.AsyncClient(timeout=effective_timeout, transport=transport)
        self._semaphore = asyncio.Semaphore(concurrency)
        self.request_count = 0
        self._stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "retry_attempts": 0,
        }

        logger.debug(f"HTTPClientService initialized with timeout={effective_timeout}s, concurrency_limit={concurrency}")

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._client.aclose()
        logger.debug("HTTPClientService closed")

    async def __aenter__(self) -> "HTTPClientService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        max_retries: int | None = None,
        idempotent: bool = True,
    ) -> httpx.Response:
        """Send a request with retry behavior.

        Args:
            method: HTTP method.
            url: Target URL for the request.
            json: Optional JSON body.
            params: Optional query parameters.
            headers: Optional HTTP headers.
            max_retries: Maximum attempts. When omitted, defaults to
                `config.HTTP_RETRY_ATTEMPTS`.
            idempotent: When false, only failures where the server cannot have
                acted on the request (connection failures and 429) are retried.

        Returns:
            The successful HTTP response.

        Raises:
            httpx.TimeoutException: When all attempts time out.
            httpx.HTTPStatusError: When a non-retryable status occurs or retries are
                exhausted.
            httpx.RequestError: When the request fails and retries are exhausted.
        """
        async with self._semaphore:
            self._stats["total_requests"] += 1
            self.request_count += 1

            effective_max_retries = max(1, max_retries if max_retries is not None else config.HTTP_RETRY_ATTEMPTS)

            last_exception: httpx.HTTPError | None = None

            for attempt in range(effective_max_retries):
                try:
                    logger.debug(f"HTTP {method} to {url} (attempt {attempt + 1}/{effective_max_retries})")

                    response = await self._client.request(method, url, json=json, params=params, headers=headers or {})
                    response.raise_for_status()

                    self._stats["successful_requests"] += 1
                    logger.debug(f"HTTP {method} successful: {response.status_code}")
                    return response

                except httpx.TimeoutException as e:
                    last_exception = e
                    logger.warning(f"HTTP timeout (attempt {attempt + 1}): {e}")

                except httpx.HTTPStatusError as e:
                    last_exception = e
                    status_code = e.response.status_code
                    response_text = e.response.text[:200]

                    logger.warning(f"HTTP status error (attempt {attempt + 1}): {status_code} - {response_text}")

                    # Don't retry on client errors (except 429 rate limit)
                    if 400 <= status_code < 500 and status_code != 429:
                        logger.error(f"Non-retryable client error {status_code}, aborting")
                        break

                except httpx.RequestError as e:
                    last_exception = e
                    logger.warning(f"HTTP request error (attempt {attempt + 1}): {e}")

                if not idempotent and not _safe_to_resend(last_exception):
                    logger.error(f"HTTP {method} may have reached the server; not resending")
                    break

                if attempt < effective_max_retries - 1:
                    delay = config.HTTP_RETRY_DELAY_SECONDS * (2**attempt)
                    logger.info(f"Retrying in {delay:.2f}s due to: {type(last_exception).__name__}")
                    await asyncio.sleep(delay)
                    self._stats["retry_attempts"] += 1

            self._stats["failed_requests"] += 1
            logger.error(f"HTTP {method} failed after {effective_max_retries} attempts: {last_exception}")

            if last_exception:
                raise last_exception
            raise httpx.RequestError(f"HTTP {method} to {url} failed with no specific error")

    def get_statistics(self) -> dict[str, Any]:
        """Return HTTP request statistics for monitoring."""
        total = self._stats["total_requests"]
        return {
            **self._stats,
            "success_rate": (self._stats["successful_requests"] / total * 100) if total > 0 else 0,
            "failure_rate": (self._stats["failed_requests"] / total * 100) if total > 0 else 0,
            "avg_retries_per_request": (self._stats["retry_attempts"] / total) if total > 0 else 0,
        }


class SupabaseRestClient:
    """Call the PostgREST endpoints of a hosted Supabase project."""

    def __init__(
        self,
        http_client: HTTPClientService,
        base_url: str | None = None,
        api_key: str | None = None,
        schema: str | None = None,
    ):
        """Initialize the REST client.

        Args:
            http_client: Shared HTTP client used for requests.
            base_url: Project URL. Defaults to `config.SUPABASE_URL`.
            api_key: Service or anon key. Defaults to `config.SUPABASE_API_KEY`.
            schema: Postgres schema exposed by the API. Defaults to `config.SUPABASE_SCHEMA`.
        """
        self._http_client = http_client
        self._base_url = (base_url if base_url is not None else config.SUPABASE_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else config.SUPABASE_API_KEY
        self._schema = schema if schema is not None else config.SUPABASE_SCHEMA

    def table_url(self, table: str) -> str:
        return f"{self._base_url}/rest/v1/{table}"

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept-Profile": self._schema,
            "Content-Profile": self._schema,
        }
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _eq_filters(filters: dict[str, Any] | None) -> dict[str, str]:
        return {column: f"eq.{value}" for column, value in (filters or {}).items()}

    async def insert(self, table: str, row: dict[str, Any], returning: str = "id") -> dict[str, Any]:
        """Insert one row and return the requested columns of the stored row."""
        response = await self._http_client.request(
            "POST",
            self.table_url(table),
            json=row,
            params={"select": returning},
            headers=self._headers(prefer="return=representation"),
            idempotent=False,
        )
        rows = response.json()
        if isinstance(rows, list):
            if not rows:
                raise ValueError(f"Insert into {table} returned no rows")
            return rows[0]
        return rows

    async def select(self, table: str, filters: dict[str, Any] | None = None, columns: str = "*") -> list[dict[str, Any]]:
        """Return the rows of `table` matching equality `filters`."""
        params = {"select": columns, **self._eq_filters(filters)}
        response = await self._http_client.request("GET", self.table_url(table), params=params, headers=self._headers())
        return response.json()

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        """Return the exact number of rows matching `filters` without fetching them."""
        params = {"select": "*", **self._eq_filters(filters)}
        response = await self._http_client.request(
            "HEAD",
            self.table_url(table),
            params=params,
            headers=self._headers(prefer="count=exact"),
        )
        # Content-Range looks like "0-4/5" or "*/0"
        content_range = response.headers.get("content-range", "")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    async def update(self, table: str, values: dict[str, Any], filters: dict[str, Any]) -> None:
        """Apply `values` to every row matching `filters`."""
        await self._http_client.request(
            "PATCH",
            self.table_url(table),
            json=values,
            params=self._eq_filters(filters),
            headers=self._headers(prefer="return=minimal"),
        )

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete every row matching `filters`."""
        await self._http_client.request(
            "DELETE",
            self.table_url(table),
            params=self._eq_filters(filters),
            headers=self._headers(prefer="return=minimal"),
        )
