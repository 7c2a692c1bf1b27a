"""Context-deduplicated resource fetching."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from ..constants import EMBEDDED_KEY, LINKS_KEY, SELF_REL
from .context import RequestContext
from .resource import Resource, normalize_resource

logger = structlog.get_logger(__name__)

# Passed through unmodified to every fetch of one top-level call
FetchOptions = dict[str, Any]

# GET a URI and return the decoded JSON document
Transport = Callable[[str, FetchOptions | None], Awaitable[Any]]


class ResourceFetcher:
    """
    Fetch HAL resources through a RequestContext.

    Every fetch goes through `RequestContext.get_or_create`, so a URI is
    requested from the transport at most once per context. A failed fetch
    stays in its slot: every caller awaiting that URI sees the same error.
    """

    def __init__(
        self,
        transport: Transport,
        context: RequestContext,
        options: FetchOptions | None = None,
    ) -> None:
        """
        Args:
            transport: Coroutine function performing the GET
            context: Request context of the current top-level call
            options: Transport options forwarded to every fetch
        """
        self.transport = transport
        self.context = context
        self.options = options

    def fetch(self, uri: str) -> asyncio.Future[Resource]:
        """Return the (shared) future of the resource at `uri`."""
        return self.context.get_or_create(uri, lambda: self._load(uri))

    async def _load(self, uri: str) -> Resource:
        logger.debug("Fetching resource", uri=uri)
        document = await self.transport(uri, self.options)
        resource = normalize_resource(document, uri=uri)

        if SELF_REL not in resource[LINKS_KEY]:
            # The request URI is the only identity we have for it
            logger.warning("Fetched resource has no self link", uri=uri)
            resource[LINKS_KEY][SELF_REL] = {"href": uri}

        # Primes the context with server-embedded resources so relations
        # pointing at them resolve without another request.
        self.context.register(resource)
        logger.debug("Fetched resource", uri=uri, embedded=list(resource[EMBEDDED_KEY]))
        return resource
