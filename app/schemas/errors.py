"""Pydantic schemas for the error envelope returned by every failing request."""

from pydantic import BaseModel, Field


class ValidationDetails(BaseModel):
    """Field-level request validation errors."""

    field_errors: dict[str, list[str]] = Field(
        default_factory=dict, description="Messages keyed by field name"
    )
    form_errors: list[str] = Field(
        default_factory=list, description="Messages not tied to a single field"
    )


class ErrorResponse(BaseModel):
    """Uniform error body: a message, plus details for validation failures only."""

    message: str = Field(..., description="Human-readable error message")
    details: ValidationDetails | None = Field(
        default=None, description="Present only for validation failures"
    )
