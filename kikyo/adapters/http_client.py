"""Transport shared by the command calls and the event stream.

A single ``requests.Session`` carries the API-key header and the timeout and
retry policy. Only transport failures (timeouts, refused or dropped
connections) are retried; any HTTP response, error status included, is handed
back for the gateway to interpret.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from kikyo.domain.errors import BackendUnavailable

_RETRYABLE = (req_exc.Timeout, req_exc.ConnectionError)


@dataclass
class HttpConfig:
    """Timeout and retry settings for the backend gateway.

    Attributes:
        request_timeout_s: Timeout in seconds for one command call, and the
            connect timeout of the event stream.
        retries: Extra attempts after the first one on transport failure.
    """
    request_timeout_s: int = 10
    retries: int = 2


class RetryingSession:
    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        self._log = logging.getLogger(__name__)
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def headers_for(self, accept: str, *, has_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": accept}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    def get(
        self,
        url: str,
        *,
        accept: str = "application/json",
        timeout: Any = None,
        stream: bool = False,
    ) -> requests.Response:
        """GET ``url``; ``timeout`` may be a ``(connect, read)`` tuple."""
        return self._send(
            "get",
            url,
            headers=self.headers_for(accept),
            timeout=timeout or self.cfg.request_timeout_s,
            stream=stream,
        )

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """POST ``json_body`` serialized as JSON text."""
        return self._send(
            "post",
            url,
            data=None if json_body is None else json.dumps(json_body),
            headers=self.headers_for("application/json", has_body=json_body is not None),
            timeout=timeout or self.cfg.request_timeout_s,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        send = getattr(self.session, method)
        attempts = max(1, self.cfg.retries + 1)
        last_exc: Optional[BaseException] = None
        for attempt in range(1, attempts + 1):
            try:
                return send(url, **kwargs)
            except _RETRYABLE as exc:
                last_exc = exc
                self._log.debug("%s %s attempt %d/%d failed: %s", method.upper(), url, attempt, attempts, exc)
        raise BackendUnavailable(f"Cannot reach backend at {url}: {last_exc}") from last_exc


__all__ = ["HttpConfig", "RetryingSession"]
