"""Typed profile document for the remapping engine.

The backend owns the authoritative copy; this module only describes its shape,
parses the JSON payload leniently and renders it back for ``set_profile``.
Keys the client does not edit are carried in ``extras`` so the flat-document
overwrite never drops them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar


class ThumbSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    EXT1 = "ext1"
    EXT2 = "ext2"

    @property
    def field_name(self) -> str:
        return f"thumb_{self.value}"


class ThumbKey(str, Enum):
    NONE = "None"
    MUHENKAN = "Muhenkan"
    HENKAN = "Henkan"
    SPACE = "Space"
    LSHIFT = "LShift"
    RSHIFT = "RShift"
    LALT = "LAlt"
    RALT = "RAlt"
    KANA = "Kana"
    CAPSLOCK = "CapsLock"


class SinglePress(str, Enum):
    # The backend spells the disabled mode "None".
    DISABLE = "None"
    ENABLE = "Enable"
    PREFIX_SHIFT = "PrefixShift"
    SPACE_KEY = "SpaceKey"


class ImeMode(str, Enum):
    AUTO = "Auto"
    TSF = "Tsf"
    IMM = "Imm"
    IGNORE = "Ignore"


class SuspendKey(str, Enum):
    NONE = "None"
    SCROLL_LOCK = "ScrollLock"
    PAUSE = "Pause"
    INSERT = "Insert"
    RIGHT_SHIFT = "RightShift"
    RIGHT_CONTROL = "RightControl"
    RIGHT_ALT = "RightAlt"


DEFAULT_OVERLAP_RATIO = 0.35

_DEFAULT_THUMB_KEYS: Dict[ThumbSide, ThumbKey] = {
    ThumbSide.LEFT: ThumbKey.MUHENKAN,
    ThumbSide.RIGHT: ThumbKey.HENKAN,
    ThumbSide.EXT1: ThumbKey.NONE,
    ThumbSide.EXT2: ThumbKey.NONE,
}

E = TypeVar("E", bound=Enum)


def single_press_allows_repeat(mode: SinglePress) -> bool:
    """Repeat only has an effect when the key emits something on its own."""
    return mode in (SinglePress.ENABLE, SinglePress.SPACE_KEY)


def clamp_ratio(value: Any) -> float:
    try:
        ratio = float(value)
    except (TypeError, ValueError):
        return DEFAULT_OVERLAP_RATIO
    if ratio != ratio:  # NaN
        return DEFAULT_OVERLAP_RATIO
    return min(1.0, max(0.0, ratio))


def ratio_to_percent(ratio: float) -> int:
    return min(100, max(0, int(round(ratio * 100))))


def percent_to_ratio(percent: Any) -> float:
    try:
        value = int(percent)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Percent must be an integer, got {percent!r}.") from exc
    return min(100, max(0, value)) / 100


def coerce_enum(enum_cls: Type[E], raw: Any, default: E) -> E:
    """Accept an enum member, its wire value or its member name."""
    if isinstance(raw, enum_cls):
        return raw
    if raw is None:
        return default
    text = str(raw).strip()
    try:
        return enum_cls(text)
    except ValueError:
        pass
    member = enum_cls.__members__.get(text.upper())
    return member if member is not None else default


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass
class ThumbSideConfig:
    key: ThumbKey = ThumbKey.NONE
    continuous: bool = False
    single_press: SinglePress = SinglePress.DISABLE
    repeat: bool = False

    @classmethod
    def from_dict(cls, payload: Any, *, default_key: ThumbKey = ThumbKey.NONE) -> "ThumbSideConfig":
        data = payload if isinstance(payload, Mapping) else {}
        return cls(
            key=coerce_enum(ThumbKey, data.get("key"), default_key),
            continuous=coerce_bool(data.get("continuous", False)),
            single_press=coerce_enum(SinglePress, data.get("single_press"), SinglePress.DISABLE),
            repeat=coerce_bool(data.get("repeat", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.value,
            "continuous": self.continuous,
            "single_press": self.single_press.value,
            "repeat": self.repeat,
        }


@dataclass
class CharKeyConfig:
    repeat_assigned: bool = False
    repeat_unassigned: bool = True
    continuous: bool = False
    overlap_ratio: float = DEFAULT_OVERLAP_RATIO

    @classmethod
    def from_dict(cls, payload: Any) -> "CharKeyConfig":
        data = payload if isinstance(payload, Mapping) else {}
        return cls(
            repeat_assigned=coerce_bool(data.get("repeat_assigned", False)),
            repeat_unassigned=coerce_bool(data.get("repeat_unassigned", True)),
            continuous=coerce_bool(data.get("continuous", False)),
            overlap_ratio=clamp_ratio(data.get("overlap_ratio", DEFAULT_OVERLAP_RATIO)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repeat_assigned": self.repeat_assigned,
            "repeat_unassigned": self.repeat_unassigned,
            "continuous": self.continuous,
            "overlap_ratio": self.overlap_ratio,
        }


@dataclass
class OperationConfig:
    ime_mode: ImeMode = ImeMode.AUTO
    suspend_key: SuspendKey = SuspendKey.NONE

    @classmethod
    def from_dict(cls, payload: Any) -> "OperationConfig":
        data = payload if isinstance(payload, Mapping) else {}
        return cls(
            ime_mode=coerce_enum(ImeMode, data.get("ime_mode"), ImeMode.AUTO),
            suspend_key=coerce_enum(SuspendKey, data.get("suspend_key"), SuspendKey.NONE),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"ime_mode": self.ime_mode.value, "suspend_key": self.suspend_key.value}


def _default_thumbs() -> Dict[ThumbSide, ThumbSideConfig]:
    return {side: ThumbSideConfig(key=_DEFAULT_THUMB_KEYS[side]) for side in ThumbSide}


_KNOWN_KEYS = frozenset(
    {side.field_name for side in ThumbSide}
    | {"char_key", "thumb_shift_overlap_ratio", "operation"}
)


@dataclass
class Profile:
    """Editable view of the backend profile document."""

    thumbs: Dict[ThumbSide, ThumbSideConfig] = field(default_factory=_default_thumbs)
    char_key: CharKeyConfig = field(default_factory=CharKeyConfig)
    thumb_shift_overlap_ratio: float = DEFAULT_OVERLAP_RATIO
    operation: OperationConfig = field(default_factory=OperationConfig)
    extras: Dict[str, Any] = field(default_factory=dict)

    def thumb(self, side: ThumbSide) -> ThumbSideConfig:
        return self.thumbs[side]

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "Profile":
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ValueError("Profile payload must be a mapping.")
        thumbs = {
            side: ThumbSideConfig.from_dict(
                payload.get(side.field_name), default_key=_DEFAULT_THUMB_KEYS[side]
            )
            for side in ThumbSide
        }
        extras = {key: value for key, value in payload.items() if key not in _KNOWN_KEYS}
        return cls(
            thumbs=thumbs,
            char_key=CharKeyConfig.from_dict(payload.get("char_key")),
            thumb_shift_overlap_ratio=clamp_ratio(
                payload.get("thumb_shift_overlap_ratio", DEFAULT_OVERLAP_RATIO)
            ),
            operation=OperationConfig.from_dict(payload.get("operation")),
            extras=extras,
        )

    def to_dict(self) -> Dict[str, Any]:
        snapshot: Dict[str, Any] = dict(self.extras)
        for side in ThumbSide:
            snapshot[side.field_name] = self.thumbs[side].to_dict()
        snapshot["char_key"] = self.char_key.to_dict()
        snapshot["thumb_shift_overlap_ratio"] = self.thumb_shift_overlap_ratio
        snapshot["operation"] = self.operation.to_dict()
        return snapshot


__all__ = [
    "CharKeyConfig",
    "DEFAULT_OVERLAP_RATIO",
    "ImeMode",
    "OperationConfig",
    "Profile",
    "SinglePress",
    "SuspendKey",
    "ThumbKey",
    "ThumbSide",
    "ThumbSideConfig",
    "clamp_ratio",
    "coerce_bool",
    "coerce_enum",
    "percent_to_ratio",
    "ratio_to_percent",
    "single_press_allows_repeat",
]
