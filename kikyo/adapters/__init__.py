"""Adapter package for external I/O implementations.

Purpose:
    Concrete implementations of the domain ports: the HTTP gateway to the
    remapping backend, its in-memory mock, the event hub and the client-local
    key/value store.

Dependencies:
    ``backend_rest`` and ``http_client`` depend on ``requests``; the rest use
    the standard library only.

Call context:
    Imported by ``kikyo.app.main`` for runtime wiring and by tests (mostly
    ``BackendMock``).
"""
