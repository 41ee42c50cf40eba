"""Common response models."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorBody(BaseModel):
    """Error payload nested in a control plane error response."""

    code: str | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response from the control plane.

    Format: ``{"error": {"code", "message"}, "status": 404}``
    """

    error: ErrorBody | None = None
    status: int | None = None

    @property
    def detail(self) -> str | None:
        return self.error.message if self.error else None
