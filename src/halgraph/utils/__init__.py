"""Utility functions and exceptions."""

from .exceptions import (
    HALAPIError,
    HALAuthenticationError,
    HALGraphError,
    HALRateLimitError,
    MalformedResourceError,
    ResourceNotFoundError,
    TemplateExpansionError,
)

__all__ = [
    "HALGraphError",
    "MalformedResourceError",
    "TemplateExpansionError",
    "ResourceNotFoundError",
    "HALAPIError",
    "HALRateLimitError",
    "HALAuthenticationError",
]
