"""Async HAL+JSON HTTP client.

The transport collaborator of the embedding engine: it GETs documents,
PUTs resource state back and maps HTTP failures onto the halgraph exception
hierarchy. Everything graph-related lives in `halgraph.core`.

Architecture Overview:
---------------------
- Async HTTP communication via httpx
- Automatic retry with exponential backoff for network errors and timeouts
- Rate limit handling honouring Retry-After
- Relative hrefs joined onto the configured base URL

HAL+JSON Response Format:
------------------------
- `_links` holds link objects keyed by relation (self, next, ...)
- `_embedded` holds nested resources keyed by relation
"""

import asyncio
from typing import Any
from urllib.parse import urljoin

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import HALConfig
from ..constants import DEFAULT_RETRY_AFTER, JSON_MEDIA_TYPE, MAX_ERROR_DETAIL_LENGTH
from ..core.fetcher import FetchOptions
from ..core.graph import embed_resource, get_hal
from ..core.resource import Resource, self_href
from ..core.state import to_state
from ..observability.metrics import get_global_collector
from ..utils.exceptions import (
    HALAPIError,
    HALAuthenticationError,
    HALRateLimitError,
    MalformedResourceError,
    ResourceNotFoundError,
)
from .response_models import parse_error_body

logger = structlog.get_logger(__name__)


class HALClient:
    """
    HAL+JSON REST client.

    Features:
    - Resource graph retrieval with embedding (get_hal)
    - Write-back of resource state (put_state)
    - Automatic retries with exponential backoff
    - Rate limit handling
    - Connection pooling via httpx.AsyncClient
    """

    def __init__(self, config: HALConfig | None = None):
        """
        Initialize the client.

        Args:
            config: Connection configuration; defaults to HALConfig()
        """
        self.config = config or HALConfig()
        self.base_url = self.config.base_url

        # HTTP client management
        self._client: httpx.AsyncClient | None = None  # Lazy-loaded

        # Metrics
        self.collector = get_global_collector()

    async def __aenter__(self):
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """
        Get HTTP client with lazy initialization.

        Connection Pool Configuration:
        - max_connections: Total concurrent connections
        - max_keepalive: Reused connections for efficiency
        """
        if self._client is None:
            headers = {"Accept": self.config.accept}
            auth = None
            if self.config.token:
                headers["Authorization"] = f"Bearer {self.config.token}"
            elif self.config.username and self.config.password:
                auth = httpx.BasicAuth(self.config.username, self.config.password)

            self._client = httpx.AsyncClient(
                verify=self.config.verify_ssl,
                timeout=self.config.timeout,
                headers=headers,
                auth=auth,
                limits=httpx.Limits(
                    max_connections=self.config.max_connections,
                    max_keepalive_connections=self.config.max_keepalive,
                ),
            )
        return self._client

    def resolve_url(self, uri: str) -> str:
        """Join a (possibly relative) href onto the configured base URL."""
        if self.base_url:
            return urljoin(self.base_url, uri)
        return uri

    @retry(
        retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await self.client.request(method, url, **kwargs)

    async def request(
        self,
        method: str,
        uri: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        _rate_limit_retries: int = 0,
    ) -> Any:
        """
        Make a request and decode the JSON response.

        Args:
            method: HTTP method (GET, PUT, ...)
            uri: Absolute URI or href relative to the base URL
            params: Query parameters
            json: JSON body
            headers: Additional headers
            timeout: Per-request timeout overriding the configured one
            _rate_limit_retries: Internal recursion counter. DO NOT USE EXTERNALLY.

        Returns:
            Parsed JSON response, or None for an empty body

        Raises:
            HALAPIError: For general API and connection errors
            HALAuthenticationError: For 401 / 403
            HALRateLimitError: For 429 after max retries
            ResourceNotFoundError: For 404
            MalformedResourceError: For a success body that is not JSON
        """
        url = self.resolve_url(uri)
        kwargs: dict[str, Any] = {"params": params, "json": json, "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout

        start_time = asyncio.get_running_loop().time()
        try:
            response = await self._send(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("HTTP request failed", method=method, url=url, error=str(e))
            self.collector.count_request(method, "error")
            raise HALAPIError(f"HTTP request failed: {e}") from e

        duration = (asyncio.get_running_loop().time() - start_time) * 1000
        self.collector.record_latency(method, duration)
        self.collector.count_request(method, response.status_code)
        logger.debug(
            "HTTP response",
            method=method,
            url=url,
            status=response.status_code,
            duration_ms=round(duration, 1),
        )

        if response.status_code == 429:
            retry_after = self._retry_after(response)
            if _rate_limit_retries >= self.config.max_rate_limit_retries:
                logger.error("Rate limit retries exhausted", retries=_rate_limit_retries, url=url)
                raise HALRateLimitError(retry_after)

            logger.warning(
                "Rate limited, waiting before retry",
                retry_after=retry_after,
                attempt=_rate_limit_retries + 1,
                max_retries=self.config.max_rate_limit_retries,
                url=url,
            )
            await asyncio.sleep(retry_after)
            return await self.request(
                method,
                uri,
                params=params,
                json=json,
                headers=headers,
                timeout=timeout,
                _rate_limit_retries=_rate_limit_retries + 1,
            )

        if response.is_error:
            self._raise_for_status(response, url)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResourceError("Response body is not valid JSON", uri=url) from e

    def _retry_after(self, response: httpx.Response) -> int:
        try:
            return int(response.headers.get("Retry-After", DEFAULT_RETRY_AFTER))
        except ValueError:
            return DEFAULT_RETRY_AFTER

    def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        message = response.text
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                message = parse_error_body(response.json()) or message
            except ValueError:
                # Keep raw text if parsing fails
                pass
        if len(message) > MAX_ERROR_DETAIL_LENGTH:
            message = message[: MAX_ERROR_DETAIL_LENGTH - 3] + "..."

        status = response.status_code
        if status == 404:
            raise ResourceNotFoundError(url, message or None)
        if status in (401, 403):
            logger.error("Request rejected by server", url=url, status=status)
            raise HALAuthenticationError(message or "Authentication failed", status_code=status)
        raise HALAPIError(f"API Error {status}: {message}", status_code=status)

    async def fetch_document(self, uri: str, options: FetchOptions | None = None) -> Any:
        """
        GET a HAL document.

        This is the transport used by the embedding engine.

        Args:
            uri: Absolute URI or href relative to the base URL
            options: Optional `headers`, `params` and `timeout` for the request
        """
        options = options or {}
        return await self.request(
            "GET",
            uri,
            params=options.get("params"),
            headers=options.get("headers"),
            timeout=options.get("timeout"),
        )

    async def get_hal(
        self, uri: str, embeds: Any = None, options: FetchOptions | None = None
    ) -> Resource:
        """
        Fetch a resource and embed the requested linked resources.

        Example:
            async with HALClient(config) as client:
                order = await client.get_hal("/orders/1", {"customer": {"address": None}})
                customer = order["_embedded"]["customer"]
        """
        return await get_hal(self.fetch_document, uri, embeds, options)

    async def embed(
        self, resource: Resource, embeds: Any = None, options: FetchOptions | None = None
    ) -> Resource:
        """Embed linked resources into an already decoded HAL document."""
        return await embed_resource(self.fetch_document, resource, embeds, options)

    async def put_state(self, resource: Resource, options: FetchOptions | None = None) -> Any:
        """
        PUT the resource state (without `_links` and `_embedded`) to its self href.

        Returns:
            The decoded response body, or None for 204 No Content
        """
        options = options or {}
        uri = self_href(resource)
        headers = {"Content-Type": JSON_MEDIA_TYPE}
        headers.update(options.get("headers") or {})

        logger.info("Writing resource state", uri=uri)
        return await self.request(
            "PUT",
            uri,
            params=options.get("params"),
            json=to_state(resource),
            headers=headers,
            timeout=options.get("timeout"),
        )
