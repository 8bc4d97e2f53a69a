from __future__ import annotations
from dataclasses import dataclass
from ..domain.errors import BackendError
from ..domain.ports import LAST_LAYOUT_PATH_KEY, BackendPort, ClientStatePort, UseCaseError
from .error_mapping import map_backend_error


@dataclass
class LoadLayoutFile:
    """Load a layout file into the engine and remember its path locally."""

    backend: BackendPort
    storage: ClientStatePort

    def __call__(self, path: str) -> str:
        path = (path or "").strip()
        if not path:
            raise UseCaseError("PATH_REQUIRED", "Layout file path is required.")
        try:
            result = self.backend.load_yab(path)
        except BackendError as exc:
            raise map_backend_error(exc, default_code="LOAD_LAYOUT_FAILED")
        self.storage.set_item(LAST_LAYOUT_PATH_KEY, path)
        return result
