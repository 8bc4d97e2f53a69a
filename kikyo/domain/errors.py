"""Domain-level error types raised by backend gateways.

Gateways translate transport and command failures into this taxonomy so view
models never see ``requests`` exceptions or raw status codes.
"""
from __future__ import annotations

from typing import Any, Optional


class BackendError(RuntimeError):
    """Base class for backend command failures."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.command = command
        self.status = status
        self.payload = payload


class BackendUnavailable(BackendError):
    """Transport failure, timeout, or backend-side crash."""


class ValidationRejected(BackendError):
    """The backend refused the payload (duplicate path, bad order, ...)."""


class NotFound(BackendError):
    """A referenced id no longer exists, usually after a concurrent delete."""


__all__ = ["BackendError", "BackendUnavailable", "NotFound", "ValidationRejected"]
