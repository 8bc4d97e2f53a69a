from __future__ import annotations
from dataclasses import dataclass
from ..domain.errors import BackendError
from ..domain.ports import BackendPort
from .error_mapping import map_backend_error


@dataclass
class SetEngineEnabled:
    backend: BackendPort

    def __call__(self, enabled: bool) -> None:
        try:
            self.backend.set_enabled(bool(enabled))
        except BackendError as exc:
            raise map_backend_error(exc, default_code="SET_ENABLED_FAILED")
