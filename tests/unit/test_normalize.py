import math

from jobtrack.core.normalize import blank_to_none, clean_tags, finite_number_or_none


def test_form_sentinels_become_absent() -> None:
    for value in ("", "   ", float("nan"), math.inf, -math.inf, "abc", None, True):
        assert finite_number_or_none(value) is None


def test_real_numbers_are_kept() -> None:
    assert finite_number_or_none(0) == 0.0
    assert finite_number_or_none("12.5") == 12.5
    assert finite_number_or_none(1_500_000) == 1_500_000.0


def test_blank_url_becomes_absent() -> None:
    assert blank_to_none("") is None
    assert blank_to_none("  ") is None
    assert blank_to_none(" https://jobs.example.com/1 ") == "https://jobs.example.com/1"


def test_clean_tags_drops_blanks_and_duplicates() -> None:
    assert clean_tags([" remote", "", "remote", "python "]) == ["remote", "python"]
