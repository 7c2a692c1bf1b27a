"""Resource state projection and serialization helpers."""

import json
from typing import Any

from ..constants import EMBEDDED_KEY, LINKS_KEY, RESERVED_KEYS, SELF_REL
from .resource import Resource, as_list


def to_state(resource: Resource) -> dict[str, Any]:
    """
    Convert a HAL resource to its resource state.

    Returns a shallow copy without `_links` and `_embedded`; the input is not
    modified.
    """
    return {key: value for key, value in resource.items() if key not in RESERVED_KEYS}


def state_body(resource: Resource) -> str:
    """Return the resource state as a JSON request body."""
    return json.dumps(to_state(resource))


def to_document(resource: Resource) -> dict[str, Any]:
    """
    Copy an embedded resource graph into a JSON-serializable tree.

    A resource that is embedded inside itself (directly or further down) is
    written as a stub holding only its self link at the point where it
    repeats.
    """
    return _copy_document(resource, frozenset())


def _copy_document(resource: Resource, ancestors: frozenset[int]) -> dict[str, Any]:
    links = resource.get(LINKS_KEY) or {}
    if id(resource) in ancestors:
        return {LINKS_KEY: {SELF_REL: links.get(SELF_REL)}}

    ancestors = ancestors | {id(resource)}
    document = {key: value for key, value in resource.items() if key != EMBEDDED_KEY}
    document[EMBEDDED_KEY] = {}
    for rel, embeds in (resource.get(EMBEDDED_KEY) or {}).items():
        copies = [_copy_document(embedded, ancestors) for embedded in as_list(embeds)]
        document[EMBEDDED_KEY][rel] = copies if isinstance(embeds, list) else copies[0]
    return document
