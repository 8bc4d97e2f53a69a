"""Translate backend errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Optional

from kikyo.adapters.api_errors import extract_error_hint
from kikyo.domain.errors import (
    BackendError,
    BackendUnavailable,
    NotFound,
    ValidationRejected,
)
from kikyo.domain.ports import UseCaseError


def map_backend_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map gateway exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by a ``BackendPort`` call.
        default_code: Code used for errors outside the backend taxonomy.
        default_message: Message used when ``exc`` carries none.

    Returns:
        UseCaseError whose ``message`` is fit for the status line.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, BackendUnavailable):
        return UseCaseError(
            "BACKEND_UNAVAILABLE",
            _compose_error_message("Backend unavailable", exc.message),
        )
    if isinstance(exc, NotFound):
        return UseCaseError(
            "NOT_FOUND",
            _compose_error_message("Not found", _detail(exc)),
        )
    if isinstance(exc, ValidationRejected):
        return UseCaseError(
            "VALIDATION_REJECTED",
            _compose_error_message("Rejected", _detail(exc)),
        )
    if isinstance(exc, BackendError):
        return UseCaseError(default_code, exc.message or default_message or "Backend error.")

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _detail(exc: BackendError) -> Optional[str]:
    hint = extract_error_hint(exc.payload)
    return hint or exc.message


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_backend_error"]
