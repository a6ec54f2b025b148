"""ServiceResult and ServiceError, the contract every service returns.

INVARIANT: All service-layer methods return ServiceResult. The CLI
consumes this type; the form store itself raises, and
:func:`failure_from` turns what it raises into a failed result.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from formctl.errors import FormctlError


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    INVALID_JSON = "INVALID_JSON"
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
    INVALID_INPUT = "INVALID_INPUT"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type of every service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (e.g. ``"add_field"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered along the way.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None


def failure(op: str, code: ErrorCode, message: str, **detail: Any) -> ServiceResult:
    """Shorthand for a failed result."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code.value, message=message, detail=detail),
    )


def failure_from(op: str, exc: FormctlError | ValueError) -> ServiceResult:
    """A failed result for an exception raised by the form store.

    Store errors carry their own code and detail; any other
    ``ValueError`` (pydantic validation included) is ``INVALID_INPUT``.
    """
    if isinstance(exc, FormctlError):
        code = ErrorCode(exc.code) if exc.code in ErrorCode else ErrorCode.INVALID_INPUT
        return failure(op, code, str(exc), **exc.detail)
    return failure(op, ErrorCode.INVALID_INPUT, str(exc))
