"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: Every public service method returns a ServiceResult. Expected
failures travel in ``error``; they are never raised past the service.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Machine-readable failure codes carried by :class:`ServiceError`."""

    NOT_FOUND = "NOT_FOUND"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    RECONSTRUCTION_FAILED = "RECONSTRUCTION_FAILED"
    EDGE_REJECTED = "EDGE_REJECTED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    IO_ERROR = "IO_ERROR"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"generate"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues met along the way.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(
    op: str,
    code: ErrorCode,
    message: str,
    *,
    warnings: list[str] | None = None,
    **detail: Any,
) -> ServiceResult:
    """Shorthand for an ``ok=False`` result."""
    return ServiceResult(
        ok=False,
        op=op,
        warnings=warnings or [],
        error=ServiceError(code=code, message=message, detail=detail),
    )
