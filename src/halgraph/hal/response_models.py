"""Pydantic models for HAL server error responses.

Design Principles:
- Graceful degradation: extra="allow" for unknown fields
- Covers both vnd.error and RFC 7807 problem documents
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class ErrorResponse(BaseModel):
    """Structured error body returned by a HAL server.

    Covers the common fields of vnd.error and RFC 7807 problem documents.

    Attributes:
        message: Primary error message (vnd.error)
        title: Short summary (problem+json)
        detail: Detailed error description
        error: Error type or category
        code: Error code (if provided)
    """

    message: str | None = Field(None, description="Primary error message")
    title: str | None = Field(None, description="Short problem summary")
    detail: str | None = Field(None, description="Detailed error description")
    error: str | None = Field(None, description="Error type or category")
    code: str | int | None = Field(None, description="Error code")

    model_config = {"extra": "allow"}

    def get_message(self) -> str:
        """Get the most relevant error message.

        Returns:
            Error message (priority: message > title > error > detail)
        """
        return self.message or self.title or self.error or self.detail or "Unknown error"

    def get_full_message(self, max_detail: int = 200) -> str:
        """Get complete error message with all available details.

        Args:
            max_detail: Details longer than this are truncated

        Returns:
            Formatted error message with code and details
        """
        msg = self.get_message()

        if self.code:
            msg += f" (Code: {self.code})"

        if self.detail and self.detail != msg:
            detail = str(self.detail)
            if len(detail) > max_detail:
                detail = detail[: max_detail - 3] + "..."
            msg += f" - {detail}"

        return msg


def parse_error_body(data: Any) -> str | None:
    """Build an error message from a decoded JSON error body, if it has one."""
    if not isinstance(data, dict):
        return None
    try:
        error_response = ErrorResponse.model_validate(data)
    except ValidationError:
        return None
    if not (
        error_response.message
        or error_response.title
        or error_response.error
        or error_response.detail
    ):
        return None
    return error_response.get_full_message()
