"""Custom exceptions for the HAL graph client.

Exception Hierarchy:
-------------------
HALGraphError (base)
├── MalformedResourceError      # Missing self link, bad link object, non-object body
├── TemplateExpansionError      # URI Template could not be expanded
├── ResourceNotFoundError       # GET 404
└── HALAPIError (base for transport errors)
    ├── HALRateLimitError       # HTTP 429 Too Many Requests
    └── HALAuthenticationError  # HTTP 401 Unauthorized / 403 Forbidden

Usage Guidelines:
----------------
1. A failed fetch fails the whole top-level call. The embedding engine never
   catches these; they surface from get_hal() unchanged.

2. An absent relation is not an error and raises nothing.

3. Let httpx errors (NetworkError, TimeoutException) bubble up inside the
   client so tenacity can retry them; after retries they are wrapped in
   HALAPIError.
"""


class HALGraphError(Exception):
    """Base exception for all halgraph errors."""

    pass


class MalformedResourceError(HALGraphError):
    """Raised when a document does not have the shape of a HAL resource."""

    def __init__(self, message: str, uri: str | None = None) -> None:
        """
        Initialize MalformedResourceError.

        Args:
            message: Error message.
            uri: Optional URI the document was fetched from.
        """
        if uri:
            message = f"{message} ({uri})"
        super().__init__(message)
        self.uri = uri


class TemplateExpansionError(HALGraphError):
    """Raised when a templated href cannot be expanded."""

    def __init__(self, template: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Cannot expand URI Template '{template}': {original_error}")
        self.template = template
        self.original_error = original_error


class ResourceNotFoundError(HALGraphError):
    """Raised when a linked resource does not exist (404)."""

    def __init__(self, uri: str, detail: str | None = None) -> None:
        """
        Initialize ResourceNotFoundError.

        Args:
            uri: URI that was requested.
            detail: Optional server-provided message.
        """
        message = f"Resource not found: {uri}"
        if detail:
            message += f" - {detail}"
        super().__init__(message)
        self.uri = uri
        self.detail = detail


class HALAPIError(HALGraphError):
    """Base exception for transport errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Initialize HALAPIError.

        Args:
            message: Error message.
            status_code: Optional HTTP status code.
        """
        super().__init__(message)
        self.status_code = status_code


class HALRateLimitError(HALAPIError):
    """Raised when the server keeps answering 429 Too Many Requests."""

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"Rate limit exceeded, retry after {retry_after}s", status_code=429)
        self.retry_after = retry_after


class HALAuthenticationError(HALAPIError):
    """Raised when the server rejects our credentials."""

    def __init__(self, message: str = "Authentication failed", status_code: int = 401) -> None:
        super().__init__(message, status_code=status_code)
