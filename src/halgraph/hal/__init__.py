"""HAL+JSON transport."""

from .client import HALClient
from .response_models import ErrorResponse

__all__ = ["HALClient", "ErrorResponse"]
