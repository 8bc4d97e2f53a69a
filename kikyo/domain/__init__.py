
"""Domain package exports for the profile document and layout entries."""

from .errors import BackendError, BackendUnavailable, NotFound, ValidationRejected
from .layout_entries import LayoutEntriesSnapshot, LayoutEntry, LayoutId
from .profile import (
    CharKeyConfig,
    ImeMode,
    OperationConfig,
    Profile,
    SinglePress,
    SuspendKey,
    ThumbKey,
    ThumbSide,
    ThumbSideConfig,
)

__all__ = [
    "BackendError",
    "BackendUnavailable",
    "CharKeyConfig",
    "ImeMode",
    "LayoutEntriesSnapshot",
    "LayoutEntry",
    "LayoutId",
    "NotFound",
    "OperationConfig",
    "Profile",
    "SinglePress",
    "SuspendKey",
    "ThumbKey",
    "ThumbSide",
    "ThumbSideConfig",
    "ValidationRejected",
]
