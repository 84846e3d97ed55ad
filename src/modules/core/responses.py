"""Standard response envelope for the public API.

Every API response (success or error) has the same shape::

    {
        "success": true,
        "message": "Client created successfully",
        "data": {...},
        "timestamp": "2026-01-01T12:00:00+00:00",
        "errors": null
    }
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from django.utils import timezone
from pydantic import BaseModel, ConfigDict, Field


class FieldError(BaseModel):
    """A single field-level validation failure."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    rejected_value: Any = None


class ApiResponse(BaseModel):
    """Immutable response envelope."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    data: Any = None
    timestamp: datetime = Field(default_factory=timezone.now)
    errors: Optional[List[FieldError]] = None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def ok(cls, data: Any, message: str) -> ApiResponse:
        return cls(success=True, message=message, data=data)

    @classmethod
    def created(cls, data: Any, message: str) -> ApiResponse:
        return cls(success=True, message=message, data=data)

    @classmethod
    def no_content(cls, message: str) -> ApiResponse:
        return cls(success=True, message=message)

    @classmethod
    def error(cls, message: str) -> ApiResponse:
        return cls(success=False, message=message)

    @classmethod
    def validation_error(cls, message: str, errors: List[FieldError]) -> ApiResponse:
        return cls(success=False, message=message, errors=errors)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_data(self) -> Dict[str, Any]:
        """JSON-compatible dict, ready to hand to a DRF ``Response``."""
        return self.model_dump(mode="json")
