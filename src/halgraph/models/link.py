"""Pydantic model for HAL link objects.

Resources themselves stay plain dicts: the embedding engine mutates them in
place and hands them back to callers. Link objects are validated when a
relation is resolved, since a wrong shape there would otherwise fail deep
inside a graph walk.
"""

from pydantic import BaseModel, Field


class HALLink(BaseModel):
    """A HAL link object.

    Attributes:
        href: URI of the target resource, or a URI Template when templated
        templated: Whether href is a URI Template (RFC 6570)
        type: Media type hint for the target resource
        deprecation: URL with information about the link's deprecation
        name: Secondary key for links sharing a relation
        profile: Profile URI of the target resource
        title: Human-readable label
        hreflang: Language of the target resource
    """

    href: str = Field(..., description="Target URI or URI Template")
    templated: bool = Field(False, description="Whether href is a URI Template")
    type: str | None = Field(None, description="Media type of the target")
    deprecation: str | None = Field(None, description="Deprecation information URL")
    name: str | None = Field(None, description="Secondary selection key")
    profile: str | None = Field(None, description="Profile URI of the target")
    title: str | None = Field(None, description="Human-readable label")
    hreflang: str | None = Field(None, description="Language of the target")

    # Allow additional fields for forward compatibility
    model_config = {"extra": "allow"}
