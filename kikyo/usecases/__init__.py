"""Use-case layer for single backend operations with user-facing errors.

Each module wraps one port call, maps ``BackendError`` to ``UseCaseError``
and performs any client-side bookkeeping that goes with it.
"""
