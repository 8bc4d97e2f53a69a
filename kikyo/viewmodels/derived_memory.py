"""Shadow values for controls whose effect is suppressed by another field.

A thumb side's ``repeat`` checkbox is disabled unless its single-press mode
lets the key emit on its own. Writing ``False`` into the document while the
control is disabled is required, but the user's last choice must come back
when the mode is switched back. This store remembers that choice.
"""

from __future__ import annotations

from typing import Dict, Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)


class DerivedFieldMemory(Generic[K]):
    def __init__(self) -> None:
        self._values: Dict[K, bool] = {}

    def get(self, key: K) -> Optional[bool]:
        return self._values.get(key)

    def set(self, key: K, value: bool) -> None:
        self._values[key] = bool(value)

    def seed(self, key: K, stored: bool) -> bool:
        """Initialize ``key`` from a loaded document unless already remembered.

        Returns True when the stored value was taken.
        """
        if key in self._values:
            return False
        self._values[key] = bool(stored)
        return True

    def reconcile(self, key: K, guard_condition: bool, live_value: bool) -> bool:
        """Effective value for the document.

        With the guard open the live value is remembered and returned; with
        it closed ``False`` is returned and the memory is left alone.
        """
        if guard_condition:
            self._values[key] = bool(live_value)
            return bool(live_value)
        return False

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values
