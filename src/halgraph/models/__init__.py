"""Data models."""

from .link import HALLink

__all__ = ["HALLink"]
