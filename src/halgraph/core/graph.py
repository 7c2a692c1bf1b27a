"""Top-level entry points of the embedding engine.

Each call owns a fresh RequestContext: resources are deduplicated within one
call and never cached across calls. Fetches still pending when a call ends are
cancelled.
"""

from typing import Any

import structlog

from ..observability.logger import LogContext
from .context import RequestContext
from .embedder import Embedder, normalize_embed_request, request_depth
from .fetcher import FetchOptions, ResourceFetcher, Transport
from .resource import Resource, self_href

logger = structlog.get_logger(__name__)


async def get_hal(
    transport: Transport,
    uri: str,
    embeds: Any = None,
    options: FetchOptions | None = None,
) -> Resource:
    """
    Fetch a HAL resource and make sure the requested relations are embedded.

    Linked resources are embedded even when the server returned only links.

    Args:
        transport: Coroutine function `(uri, options) -> decoded JSON`
        uri: URI of the root resource
        embeds: Embed request (see normalize_embed_request)
        options: Transport options used for every request of this call

    Returns:
        The root resource with all requested relations embedded

    Raises:
        HALGraphError: If any fetch fails or a document is malformed. No
            partial result is returned.
    """
    request = normalize_embed_request(embeds)
    context = RequestContext()
    fetcher = ResourceFetcher(transport, context, options)

    with LogContext(root=uri):
        logger.debug("Fetching resource graph", depth=request_depth(request))
        try:
            resource = await fetcher.fetch(uri)
            await Embedder(fetcher).embed(resource, request)
        finally:
            context.close()
        _log_summary(context)
    return resource


async def embed_resource(
    transport: Transport,
    resource: Resource,
    embeds: Any = None,
    options: FetchOptions | None = None,
) -> Resource:
    """
    Embed the requested relations into an already decoded HAL resource.

    The resource and its server-embedded descendants are registered first, so
    relations pointing at them are not fetched again.

    Raises:
        MalformedResourceError: If the resource (or an embedded one) has no
            self link.
    """
    request = normalize_embed_request(embeds)
    context = RequestContext()
    context.register(resource)
    fetcher = ResourceFetcher(transport, context, options)

    with LogContext(root=self_href(resource)):
        logger.debug("Embedding into resource", depth=request_depth(request))
        try:
            await Embedder(fetcher).embed(resource, request)
        finally:
            context.close()
        _log_summary(context)
    return resource


def _log_summary(context: RequestContext) -> None:
    logger.debug(
        "Resource graph complete",
        resources=len(context),
        fetched=context.stats.misses,
        reused=context.stats.hits,
        registered=context.stats.registered,
        hit_rate=round(context.stats.hit_rate(), 3),
    )
