"""
Common schemas shared across API endpoints.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class StatusResponse(BaseModel):
    """Response for write operations."""

    status: str = "success"
    id: Optional[str] = Field(None, description="ID of the created document")


class SuccessResponse(BaseModel):
    """Outcome of an identity provider operation."""

    success: bool
