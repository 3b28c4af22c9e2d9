# backend/portfolio_ledger/schemas/errors.py
"""
Pydantic schemas for error responses.

Used by the global exception handlers in main.py. CRUD routes report errors
in their own {code, message, data} envelope instead.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """
    Standard error response format.

    {"success": false, "error": "InsufficientFundsError", "message": "...", "details": {...}}
    """

    success: bool = Field(default=False)
    error: str = Field(
        ...,
        description="Error type/code (e.g., 'AssetNotFoundError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Additional error context (optional)"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation failure (400) with one entry per invalid field."""

    success: bool = Field(default=False)
    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="List of validation errors"
    )
