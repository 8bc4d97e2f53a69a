"""Turn failed backend responses into the domain error taxonomy.

Commands fail with either a bare JSON string (``"Layout file is already
registered"``) or an object carrying the text under ``error``/``message``,
optionally with a ``hint``. Plain-text bodies are accepted as well.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from kikyo.domain.errors import (
    BackendError,
    BackendUnavailable,
    NotFound,
    ValidationRejected,
)

_MESSAGE_KEYS = ("error", "message", "detail", "title")
_HINT_KEYS = ("hint", "details", "errors")
_MAX_TEXT = 200


def read_payload(resp: Any) -> Any:
    """JSON body of ``resp``, else a trimmed text snippet, else ``None``."""
    try:
        return resp.json()
    except ValueError:
        text = (getattr(resp, "text", "") or "").strip()
        return text[:400] or None


def error_text(payload: Any) -> Optional[str]:
    """First human-readable message found in ``payload``."""
    if isinstance(payload, str):
        return _clip(payload)
    if isinstance(payload, dict):
        for key in _MESSAGE_KEYS:
            found = error_text(payload.get(key))
            if found:
                return found
        return None
    if isinstance(payload, list):
        return next(filter(None, (error_text(item) for item in payload)), None)
    return None


def extract_error_hint(payload: Any) -> Optional[str]:
    """Extra guidance attached to an error, if the backend sent any."""
    if isinstance(payload, dict):
        for key in _HINT_KEYS:
            hint = _flatten(payload.get(key))
            if hint:
                return hint
        return None
    if isinstance(payload, (str, list)):
        return _flatten(payload)
    return None


def error_from_response(command: str, resp: Any) -> BackendError:
    """Map a non-2xx response to the matching ``BackendError`` subclass."""
    status = int(getattr(resp, "status_code", 0) or 0)
    payload = read_payload(resp)
    message = f"{command}: {error_text(payload) or f'HTTP {status}'}"
    if status == 404:
        cls = NotFound
    elif 400 <= status < 500:
        cls = ValidationRejected
    else:
        cls = BackendUnavailable
    return cls(message, command=command, status=status, payload=payload)


def _flatten(data: Any) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, str):
        return _clip(data)
    if isinstance(data, list):
        return _join(_flatten(item) for item in data[:3])
    if isinstance(data, dict):
        return _join(
            f"{key}={text}" for key, text in ((k, _flatten(v)) for k, v in list(data.items())[:4]) if text
        )
    return _clip(str(data))


def _join(parts: Iterable[Optional[str]]) -> Optional[str]:
    joined = "; ".join(part for part in parts if part)
    return joined[:_MAX_TEXT] or None


def _clip(text: str) -> Optional[str]:
    return text.strip()[:_MAX_TEXT] or None
