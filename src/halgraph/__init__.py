"""halgraph - Fetch HAL resource graphs and embed linked resources."""

from .config import AppConfig, HALConfig
from .core import embed, embed_resource, get_hal, link_href, state_body, to_state
from .hal import HALClient

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "HALConfig",
    "HALClient",
    "embed",
    "embed_resource",
    "get_hal",
    "link_href",
    "state_body",
    "to_state",
]
