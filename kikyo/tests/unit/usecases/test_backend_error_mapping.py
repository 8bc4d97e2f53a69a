from kikyo.domain.errors import BackendError, BackendUnavailable, NotFound, ValidationRejected
from kikyo.domain.ports import UseCaseError
from kikyo.usecases.error_mapping import map_backend_error


def test_unavailable_maps_to_stable_code() -> None:
    err = map_backend_error(BackendUnavailable("connection refused"), default_code="X")

    assert err.code == "BACKEND_UNAVAILABLE"
    assert err.message == "Backend unavailable: connection refused"


def test_validation_prefers_payload_hint() -> None:
    exc = ValidationRejected("create: rejected", payload={"hint": "Layout file is already registered"})

    err = map_backend_error(exc, default_code="X")

    assert err.code == "VALIDATION_REJECTED"
    assert err.message == "Rejected: Layout file is already registered"


def test_not_found_uses_message_without_hint() -> None:
    err = map_backend_error(NotFound("Layout entry not found"), default_code="X")

    assert err.code == "NOT_FOUND"
    assert err.message == "Not found: Layout entry not found"


def test_plain_backend_error_gets_default_code() -> None:
    err = map_backend_error(BackendError("injected"), default_code="SAVE_PROFILE_FAILED")

    assert err.code == "SAVE_PROFILE_FAILED"
    assert err.message == "injected"


def test_use_case_error_passes_through() -> None:
    original = UseCaseError("PATH_REQUIRED", "Layout file path is required.")

    assert map_backend_error(original, default_code="X") is original
