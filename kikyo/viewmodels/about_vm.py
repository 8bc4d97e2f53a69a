"""Content of the About dialog: app version and layout-testing contributors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple

CONTRIBUTORS_HEADING = "Layout testing contributors"
CONTRIBUTORS_NOTE = "(in no particular order)"
INLINE_VISIBLE_COUNT = 12

# Handles of people who helped validate the bundled layouts.
LAYOUT_CONTRIBUTORS: Tuple[str, ...] = ()


def normalize_contributors(names: Any) -> Tuple[str, ...]:
    """Trimmed, non-empty string names; anything that is not a list gives ``()``."""
    if not isinstance(names, (list, tuple)):
        return ()
    cleaned = (name.strip() if isinstance(name, str) else "" for name in names)
    return tuple(name for name in cleaned if name)


@dataclass(frozen=True)
class AboutInfo:
    """What the About dialog shows.

    Attributes:
        version: Backend-reported app version, ``""`` when unknown.
        contributors: Every contributor name, in display order.
        visible: The names that fit inline.
        remaining_count: Names beyond ``visible``.
    """
    version: str
    contributors: Tuple[str, ...]
    visible: Tuple[str, ...]
    remaining_count: int

    @property
    def has_contributors(self) -> bool:
        return bool(self.contributors)

    @property
    def has_overflow(self) -> bool:
        return self.remaining_count > 0

    @property
    def version_label(self) -> str:
        return f"Version {self.version}" if self.version else "Version unknown"


def build_about(
    version: str,
    contributors: Iterable[str] = LAYOUT_CONTRIBUTORS,
    inline_visible_count: int = INLINE_VISIBLE_COUNT,
) -> AboutInfo:
    names = normalize_contributors(list(contributors))
    visible = names[: max(0, inline_visible_count)]
    return AboutInfo(
        version=(version or "").strip(),
        contributors=names,
        visible=visible,
        remaining_count=len(names) - len(visible),
    )


__all__ = ["AboutInfo", "CONTRIBUTORS_HEADING", "CONTRIBUTORS_NOTE", "build_about", "normalize_contributors"]
