"""Helpers for the HAL resource shape.

A resource is the dict decoded from a HAL+JSON document. Both reserved maps
are created on first sight so callers can index them without checks.
"""

from typing import Any

from ..constants import EMBEDDED_KEY, LINKS_KEY, SELF_REL
from ..utils.exceptions import MalformedResourceError

Resource = dict[str, Any]


def as_list(value: Any) -> list[Any]:
    """Wrap a single value in a list; lists pass through unchanged."""
    return value if isinstance(value, list) else [value]


def normalize_resource(resource: Any, uri: str | None = None) -> Resource:
    """
    Ensure `_links` and `_embedded` exist on a decoded document.

    Mutates and returns the same dict.

    Raises:
        MalformedResourceError: If the document is not a JSON object or a
            reserved key holds something other than an object.
    """
    if not isinstance(resource, dict):
        raise MalformedResourceError(
            f"Expected a JSON object, got {type(resource).__name__}", uri=uri
        )
    for key in (LINKS_KEY, EMBEDDED_KEY):
        value = resource.setdefault(key, {})
        if not isinstance(value, dict):
            raise MalformedResourceError(
                f"'{key}' must be an object, got {type(value).__name__}", uri=uri
            )
    return resource


def self_href(resource: Resource) -> str:
    """
    Return the href of the resource's self link.

    Raises:
        MalformedResourceError: If there is no usable self link.
    """
    links = resource.get(LINKS_KEY)
    link = links.get(SELF_REL) if isinstance(links, dict) else None
    if isinstance(link, list) and len(link) == 1:
        link = link[0]
    href = link.get("href") if isinstance(link, dict) else None
    if not isinstance(href, str) or not href:
        raise MalformedResourceError("Resource has no self link")
    return href
