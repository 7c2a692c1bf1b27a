"""Recursive embedding of linked resources.

An embed request is a nested mapping of relation names:

    {"author": {"friends": None}, "comments": None}

Every key is a relation to embed, every value the embed request for the
resources found under it. The embedder walks this tree in lock-step with the
resource graph, so recursion depth is the depth of the request no matter how
the resources link to each other.

Resources are shared by URI through the RequestContext. A relation pointing
back at an ancestor receives that very instance, which can make the result
self-referential.
"""

import asyncio
from collections.abc import Coroutine, Iterable, Mapping
from typing import Any

import structlog

from ..constants import EMBEDDED_KEY
from .fetcher import ResourceFetcher
from .links import link_targets
from .resource import Resource

logger = structlog.get_logger(__name__)

EmbedRequest = dict[str, "EmbedRequest"]


def _merge(target: EmbedRequest, source: EmbedRequest) -> EmbedRequest:
    for rel, child in source.items():
        if rel in target:
            _merge(target[rel], child)
        else:
            target[rel] = child
    return target


def normalize_embed_request(embeds: Any) -> EmbedRequest:
    """
    Turn any accepted embed request form into a nested dict of dicts.

    Accepted forms:
        None                      -> embed nothing
        "rel"                     -> {"rel": {}}
        {"rel": None | <form>}    -> children normalized recursively
        [<form>, <form>, ...]     -> deep-merged into one request

    Raises:
        TypeError: For any other value.
    """
    if embeds is None:
        return {}
    if isinstance(embeds, str):
        return {embeds: {}}
    if isinstance(embeds, Mapping):
        request: EmbedRequest = {}
        for rel, child in embeds.items():
            if not isinstance(rel, str):
                raise TypeError(f"Embed request keys must be relation names, got {rel!r}")
            request[rel] = normalize_embed_request(child)
        return request
    if isinstance(embeds, Iterable):
        request = {}
        for item in embeds:
            _merge(request, normalize_embed_request(item))
        return request
    raise TypeError(f"Unsupported embed request: {embeds!r}")


def embed(rel: str, children: Any = None) -> EmbedRequest:
    """
    Build an embed request for one relation.

    Example:
        embed("author", [embed("friends"), embed("avatar")])
        # {"author": {"friends": {}, "avatar": {}}}
    """
    return {rel: normalize_embed_request(children)}


def parse_embed_paths(paths: Iterable[str]) -> EmbedRequest:
    """
    Build an embed request from dotted relation paths.

    Example:
        parse_embed_paths(["author.friends", "author.avatar", "comments"])
        # {"author": {"friends": {}, "avatar": {}}, "comments": {}}
    """
    request: EmbedRequest = {}
    for path in paths:
        rels = [rel.strip() for rel in path.split(".")]
        if not all(rels):
            raise ValueError(f"Invalid embed path: {path!r}")
        node = request
        for rel in rels:
            node = node.setdefault(rel, {})
    return request


def request_depth(request: EmbedRequest) -> int:
    """Number of nested levels in a normalized embed request."""
    if not request:
        return 0
    return 1 + max(request_depth(child) for child in request.values())


async def _run_all(coros: Iterable[Coroutine[Any, Any, Any]]) -> list[Any]:
    """
    Run coroutines concurrently and return their results in order.

    The first failure cancels the others and is re-raised as is, not as an
    ExceptionGroup. Nested walks unwrap their own groups, so every member of
    a group caught here is a plain exception.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except ExceptionGroup as e:
        error = e.exceptions[0]
        raise error from error.__cause__
    return [task.result() for task in tasks]


class Embedder:
    """
    Embed linked resources into a resource, recursively.

    Relations of one request, and the elements of a link array, are fetched
    concurrently in a task group. The first failure cancels the sibling
    branches, waits for them to unwind and propagates unwrapped, so no fetch
    is started once the walk has failed.
    """

    def __init__(self, fetcher: ResourceFetcher) -> None:
        self.fetcher = fetcher

    async def embed(self, resource: Resource, embeds: Any) -> Resource:
        """
        Embed every relation named in `embeds` into `resource`.

        Args:
            resource: Normalized HAL resource, mutated in place
            embeds: Embed request in any form accepted by normalize_embed_request

        Returns:
            The same resource, once all requested relations have settled
        """
        return await self._embed(resource, normalize_embed_request(embeds))

    async def _embed(self, resource: Resource, request: EmbedRequest) -> Resource:
        if request:
            await _run_all(
                self._embed_relation(resource, rel, child) for rel, child in request.items()
            )
        return resource

    async def _embed_relation(self, resource: Resource, rel: str, request: EmbedRequest) -> None:
        # A server-embedded resource is reused under its own self href
        targets = link_targets(resource, rel, prefer_embedded=True)
        if targets is None:
            logger.debug("Relation not present, skipping", rel=rel)
            return

        linked = await _run_all(self._fetch_and_embed(href, request) for href in targets.hrefs)
        resource[EMBEDDED_KEY][rel] = targets.shape(linked)

    async def _fetch_and_embed(self, href: str, request: EmbedRequest) -> Resource:
        linked = await self.fetcher.fetch(href)
        return await self._embed(linked, request)
