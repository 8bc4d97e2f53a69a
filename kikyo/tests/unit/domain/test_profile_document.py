import math

import pytest

from kikyo.domain.profile import (
    DEFAULT_OVERLAP_RATIO,
    ImeMode,
    Profile,
    SinglePress,
    SuspendKey,
    ThumbKey,
    ThumbSide,
    clamp_ratio,
    coerce_enum,
    percent_to_ratio,
    ratio_to_percent,
    single_press_allows_repeat,
)


def test_empty_payload_uses_engine_defaults() -> None:
    profile = Profile.from_dict({})

    assert profile.thumb(ThumbSide.LEFT).key is ThumbKey.MUHENKAN
    assert profile.thumb(ThumbSide.RIGHT).key is ThumbKey.HENKAN
    assert profile.thumb(ThumbSide.EXT1).key is ThumbKey.NONE
    assert profile.char_key.repeat_unassigned is True
    assert profile.char_key.overlap_ratio == DEFAULT_OVERLAP_RATIO
    assert profile.thumb_shift_overlap_ratio == DEFAULT_OVERLAP_RATIO
    assert profile.operation.ime_mode is ImeMode.AUTO
    assert profile.operation.suspend_key is SuspendKey.NONE


def test_wire_values_parse_and_render_back() -> None:
    payload = {
        "thumb_left": {"key": "Space", "continuous": True, "single_press": "None", "repeat": False},
        "thumb_right": {"key": "Henkan", "continuous": False, "single_press": "SpaceKey", "repeat": True},
        "char_key": {"repeat_assigned": True, "repeat_unassigned": False, "continuous": True, "overlap_ratio": 0.5},
        "thumb_shift_overlap_ratio": 0.2,
        "operation": {"ime_mode": "Tsf", "suspend_key": "Pause"},
    }

    profile = Profile.from_dict(payload)

    assert profile.thumb(ThumbSide.LEFT).single_press is SinglePress.DISABLE
    assert profile.thumb(ThumbSide.RIGHT).single_press is SinglePress.SPACE_KEY
    assert profile.operation.suspend_key is SuspendKey.PAUSE
    rendered = profile.to_dict()
    assert rendered["thumb_left"] == payload["thumb_left"]
    assert rendered["thumb_right"] == payload["thumb_right"]
    assert rendered["char_key"] == payload["char_key"]
    assert rendered["operation"] == payload["operation"]
    assert rendered["thumb_ext1"]["key"] == "None"


def test_unknown_keys_survive_the_overwrite() -> None:
    profile = Profile.from_dict({"future_flag": {"x": 1}, "thumb_shift_overlap_ratio": 0.4})

    rendered = profile.to_dict()

    assert rendered["future_flag"] == {"x": 1}
    assert rendered["thumb_shift_overlap_ratio"] == 0.4


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValueError):
        Profile.from_dict(["not", "a", "profile"])  # type: ignore[arg-type]


def test_coerce_enum_accepts_member_value_and_name() -> None:
    assert coerce_enum(SinglePress, SinglePress.ENABLE, SinglePress.DISABLE) is SinglePress.ENABLE
    assert coerce_enum(SinglePress, "PrefixShift", SinglePress.DISABLE) is SinglePress.PREFIX_SHIFT
    assert coerce_enum(SinglePress, "space_key", SinglePress.DISABLE) is SinglePress.SPACE_KEY
    assert coerce_enum(SinglePress, "bogus", SinglePress.DISABLE) is SinglePress.DISABLE


def test_repeat_is_only_meaningful_for_emitting_modes() -> None:
    assert single_press_allows_repeat(SinglePress.ENABLE)
    assert single_press_allows_repeat(SinglePress.SPACE_KEY)
    assert not single_press_allows_repeat(SinglePress.DISABLE)
    assert not single_press_allows_repeat(SinglePress.PREFIX_SHIFT)


def test_overlap_percent_conversions() -> None:
    assert ratio_to_percent(0.35) == 35
    assert percent_to_ratio(35) == 0.35
    assert percent_to_ratio(ratio_to_percent(0.35)) == 0.35
    assert percent_to_ratio("80") == 0.8
    assert percent_to_ratio(150) == 1.0
    assert percent_to_ratio(-5) == 0.0
    assert ratio_to_percent(1.7) == 100


def test_percent_must_be_integer() -> None:
    with pytest.raises(ValueError):
        percent_to_ratio("thirty")


def test_clamp_ratio_falls_back_for_garbage() -> None:
    assert clamp_ratio("x") == DEFAULT_OVERLAP_RATIO
    assert clamp_ratio(math.nan) == DEFAULT_OVERLAP_RATIO
    assert clamp_ratio(2) == 1.0
    assert clamp_ratio(-0.1) == 0.0
