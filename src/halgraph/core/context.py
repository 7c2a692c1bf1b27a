"""Request-scoped resource cache.

A RequestContext lives for exactly one top-level call. For every URI it holds
nothing (not requested yet), a pending future (fetch in flight) or a resolved
future (fetched, or discovered embedded inside another resource).

Claiming a slot is a single synchronous step on the event loop, so two tasks
asking for the same URI always observe the same future and therefore the same
resource instance. Slots are never overwritten once claimed.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from ..constants import EMBEDDED_KEY
from ..observability.metrics import get_global_collector
from .resource import Resource, as_list, normalize_resource, self_href

logger = structlog.get_logger(__name__)


@dataclass
class ContextStats:
    """Statistics for one request context."""

    hits: int = 0
    misses: int = 0
    registered: int = 0

    def hit_rate(self) -> float:
        """
        Calculate lookup hit rate.

        Returns:
            float: Hit rate as a decimal (0.0 to 1.0).
        """
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class RequestContext:
    """
    Deduplicating URI -> resource future map for one top-level call.

    Never share an instance between calls; caching across calls is the
    transport's business, not this class's.
    """

    def __init__(self) -> None:
        self._slots: dict[str, asyncio.Future[Resource]] = {}
        self.stats = ContextStats()
        self.collector = get_global_collector()

    def __contains__(self, uri: object) -> bool:
        return uri in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def get_or_create(
        self, uri: str, producer: Callable[[], Awaitable[Resource]]
    ) -> asyncio.Future[Resource]:
        """
        Return the future for `uri`, claiming the slot with `producer()` if empty.

        The producer is only invoked when the slot is empty. Its coroutine is
        scheduled as a task so every caller awaits the same future.

        Args:
            uri: Identity key of the resource
            producer: Zero-argument callable returning an awaitable resource

        Returns:
            The (possibly already settled) future of the resource
        """
        slot = self._slots.get(uri)
        if slot is not None:
            self.stats.hits += 1
            self.collector.count_context_lookup(hit=True)
            logger.debug("Request context hit", uri=uri, settled=slot.done())
            return slot

        self.stats.misses += 1
        self.collector.count_context_lookup(hit=False)
        slot = asyncio.ensure_future(producer())
        self._slots[uri] = slot
        return slot

    def close(self) -> None:
        """Cancel fetches still in flight once the owning call has finished."""
        for uri, slot in self._slots.items():
            if not slot.done():
                logger.debug("Cancelling pending fetch", uri=uri)
                slot.cancel()

    def register(self, resource: Resource) -> None:
        """
        Register a resource and all its embedded descendants.

        Each resource is normalized and stored under its own self href as a
        resolved future, unless that slot is already claimed (first sight
        wins). Descendants of an already-claimed resource are still visited
        so they get normalized and become reachable by their own URIs.

        A resource reached again through its own embedded descendants (a graph
        this library produced can be self-referential) is visited once.

        Raises:
            MalformedResourceError: If any visited resource lacks a self link.
        """
        self._register(resource, set())

    def _register(self, resource: Resource, visited: set[int]) -> None:
        if id(resource) in visited:
            return
        visited.add(id(resource))

        normalize_resource(resource)
        href = self_href(resource)

        if href not in self._slots:
            future: asyncio.Future[Resource] = asyncio.get_running_loop().create_future()
            future.set_result(resource)
            self._slots[href] = future
            self.stats.registered += 1
            logger.debug("Registered resource", uri=href)

        for embeds in resource[EMBEDDED_KEY].values():
            for embedded in as_list(embeds):
                self._register(embedded, visited)
