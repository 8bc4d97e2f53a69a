from kikyo.viewmodels.about_vm import build_about, normalize_contributors


def test_contributor_names_are_trimmed_and_blank_ones_dropped() -> None:
    assert normalize_contributors([" alice ", "", 3, "bob", "   "]) == ("alice", "bob")
    assert normalize_contributors("alice") == ()
    assert normalize_contributors(None) == ()


def test_empty_list_hides_the_section() -> None:
    info = build_about("1.4.0", contributors=[])

    assert not info.has_contributors
    assert not info.has_overflow
    assert info.version_label == "Version 1.4.0"


def test_overflow_counts_names_beyond_inline_limit() -> None:
    names = [f"user{i}" for i in range(15)]

    info = build_about("", contributors=names, inline_visible_count=12)

    assert info.contributors == tuple(names)
    assert info.visible == tuple(names[:12])
    assert info.remaining_count == 3
    assert info.has_overflow
    assert info.version_label == "Version unknown"
