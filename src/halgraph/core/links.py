"""Link relation resolution.

Turns a relation name into the URI(s) of its target resource(s). Explicit
links win; a relation the server only embedded falls back to the self href
of the embedded resource(s).
"""

from dataclasses import dataclass
from typing import Any

import uritemplate
from pydantic import ValidationError

from ..constants import EMBEDDED_KEY, LINKS_KEY
from ..models.link import HALLink
from ..utils.exceptions import MalformedResourceError, TemplateExpansionError
from .resource import Resource, as_list, self_href


@dataclass(frozen=True)
class Targets:
    """
    Resolved target URIs of one relation.

    `many` records whether the source was a list, so the embedded result can
    be written back with the same plurality even when the list has a single
    element (or none).
    """

    hrefs: tuple[str, ...]
    many: bool

    def shape(self, items: list[Any]) -> Any:
        """Return `items` as a list, or its only element for a single target."""
        if self.many:
            return list(items)
        return items[0]

    def unwrap(self) -> str | list[str]:
        return self.shape(list(self.hrefs))


def expand_uri(href: str, params: dict[str, Any] | None) -> str:
    """
    Expand a URI Template with `params`.

    Raises:
        TemplateExpansionError: If uritemplate rejects the template.
    """
    try:
        return uritemplate.expand(href, params or {})
    except (TypeError, ValueError) as e:
        raise TemplateExpansionError(href, e) from e


def _link_uri(raw: Any, rel: str, params: dict[str, Any] | None) -> str:
    try:
        link = HALLink.model_validate(raw)
    except ValidationError as e:
        raise MalformedResourceError(f"Invalid link for relation '{rel}': {e}") from e
    if link.templated and params is not None:
        return expand_uri(link.href, params)
    return link.href


def link_targets(
    resource: Resource,
    rel: str,
    params: dict[str, Any] | None = None,
    prefer_embedded: bool = False,
) -> Targets | None:
    """
    Resolve `rel` into a Targets value, or None if the relation is absent.

    Args:
        resource: Normalized HAL resource
        rel: Link relation type
        params: URI Template parameters for templated links
        prefer_embedded: Look at `_embedded` before `_links`. The embedder
            uses this so a server-embedded resource is reused under its own
            identity.
    """
    links = resource.get(LINKS_KEY) or {}
    embedded = resource.get(EMBEDDED_KEY) or {}

    def from_links() -> Targets | None:
        link = links.get(rel)
        if link is None:
            return None
        return Targets(
            hrefs=tuple(_link_uri(item, rel, params) for item in as_list(link)),
            many=isinstance(link, list),
        )

    def from_embedded() -> Targets | None:
        embeds = embedded.get(rel)
        if embeds is None:
            return None
        return Targets(
            hrefs=tuple(self_href(item) for item in as_list(embeds)),
            many=isinstance(embeds, list),
        )

    if prefer_embedded:
        targets = from_embedded()
        # An empty embedded array has no resource to reuse
        if targets is None or not targets.hrefs:
            return from_links() or targets
        return targets
    return from_links() or from_embedded()


def link_href(
    resource: Resource, rel: str, params: dict[str, Any] | None = None
) -> str | list[str] | None:
    """
    Follow a link relation and return the URI of the target resource(s).

    If the resource has no link with the relation but does contain an embedded
    resource (or resources) under it, the self link of the embedded
    resource(s) is used.

    Args:
        resource: The subject resource
        rel: The link relation type
        params: Parameters to expand templated hrefs with

    Returns:
        A URI for a single link, a list of URIs for a link array, None if the
        relation does not exist
    """
    targets = link_targets(resource, rel, params)
    if targets is None:
        return None
    return targets.unwrap()
