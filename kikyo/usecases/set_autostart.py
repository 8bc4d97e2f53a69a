from __future__ import annotations
from dataclasses import dataclass
from ..domain.errors import BackendError
from ..domain.ports import BackendPort
from .error_mapping import map_backend_error


@dataclass
class SetAutostart:
    backend: BackendPort

    def __call__(self, enabled: bool) -> bool:
        try:
            if enabled:
                self.backend.autostart_enable()
            else:
                self.backend.autostart_disable()
            return self.backend.autostart_is_enabled()
        except BackendError as exc:
            raise map_backend_error(exc, default_code="AUTOSTART_FAILED")
