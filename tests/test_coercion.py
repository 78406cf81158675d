import pytest

from src.feed.coercion import parse_float, parse_int, to_bool, to_float, to_int, to_optional_int


@pytest.mark.parametrize("raw,expected", [
    (None, 7),
    (42, 42),
    (12.9, 12),
    (-3.7, -3),
    ("15", 15),
    (" 15 ", 15),
    ("12.5", 7),
    ("abc", 7),
    (True, 7),
    ([1], 7),
    (float("nan"), 7),
    ("1_000", 7),
    ("１２", 7),
    ("٣", 7),
])
def test_to_int(raw, expected):
    assert to_int(raw, 7) == expected


@pytest.mark.parametrize("raw,expected", [
    (None, 1.5),
    (2, 2.0),
    (0.25, 0.25),
    ("0.55", 0.55),
    ("1,000.5", 1000.5),
    ("nan", 1.5),
    ("", 1.5),
    (False, 1.5),
    ({"v": 1}, 1.5),
    ("1_000.5", 1.5),
    ("０.５", 1.5),
])
def test_to_float(raw, expected):
    assert to_float(raw, 1.5) == pytest.approx(expected)


@pytest.mark.parametrize("raw,default,expected", [
    (None, True, True),
    (True, False, True),
    (False, True, False),
    ("true", False, True),
    ("False", True, False),
    ("1", False, True),
    ("0", True, False),
    (1, False, True),
    (0, True, False),
    (2, False, False),
    ("yes", True, True),
])
def test_to_bool(raw, default, expected):
    assert to_bool(raw, default) is expected


def test_to_optional_int_distinguishes_missing_from_zero():
    assert to_optional_int(None) is None
    assert to_optional_int("bad") is None
    assert to_optional_int(0) == 0
    assert to_optional_int("1000") == 1000


def test_parse_functions_return_none_on_failure():
    assert parse_int("bad") is None
    assert parse_int(None) is None
    assert parse_int("-12") == -12
    assert parse_float("2_5") is None
    assert parse_float(" 2.5 ") == pytest.approx(2.5)
