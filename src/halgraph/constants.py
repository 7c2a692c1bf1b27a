"""Constants for the HAL graph client.

Named values shared by the transport, the embedding engine and the CLI.
"""

# -----------------------------------------------------------------------------
# HAL Reserved Keys
# -----------------------------------------------------------------------------

# Map of relation -> link object (or list of link objects)
LINKS_KEY: str = "_links"

# Map of relation -> embedded resource (or list of embedded resources)
EMBEDDED_KEY: str = "_embedded"

# Relation whose href is the canonical identity of a resource
SELF_REL: str = "self"

RESERVED_KEYS: frozenset[str] = frozenset({LINKS_KEY, EMBEDDED_KEY})


# -----------------------------------------------------------------------------
# Media Types
# -----------------------------------------------------------------------------

HAL_MEDIA_TYPE: str = "application/hal+json"
JSON_MEDIA_TYPE: str = "application/json"


# -----------------------------------------------------------------------------
# Transport Defaults
# -----------------------------------------------------------------------------

DEFAULT_TIMEOUT: int = 30

# Maximum number of 429 responses honoured before giving up on a request
DEFAULT_MAX_RATE_LIMIT_RETRIES: int = 3

# Retry-After fallback (seconds) when the header is missing or unparsable
DEFAULT_RETRY_AFTER: int = 5

# Error details longer than this are truncated in exception messages
MAX_ERROR_DETAIL_LENGTH: int = 200
