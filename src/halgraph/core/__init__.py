"""Embedding engine: link resolution, request context, fetching and embedding."""

from .context import ContextStats, RequestContext
from .embedder import Embedder, embed, normalize_embed_request, parse_embed_paths
from .fetcher import FetchOptions, ResourceFetcher, Transport
from .graph import embed_resource, get_hal
from .links import Targets, expand_uri, link_href, link_targets
from .state import state_body, to_document, to_state

__all__ = [
    "ContextStats",
    "RequestContext",
    "Embedder",
    "embed",
    "normalize_embed_request",
    "parse_embed_paths",
    "FetchOptions",
    "ResourceFetcher",
    "Transport",
    "embed_resource",
    "get_hal",
    "Targets",
    "expand_uri",
    "link_href",
    "link_targets",
    "state_body",
    "to_document",
    "to_state",
]
