from __future__ import annotations

import pytest

from regionsync._normalize import safe_float, safe_int, safe_str


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("", None),
        ("1.5", 1.5),
        (2, 2.0),
        (True, None),
        ("abc", None),
        (float("nan"), None),
        (float("inf"), None),
    ],
)
def test_safe_float(value: object, expected: float | None) -> None:
    assert safe_float(value) == expected


def test_safe_int_truncates_floats() -> None:
    assert safe_int("37000.0") == 37000
    assert safe_int(None) is None


def test_safe_str_strips_and_blanks_to_none() -> None:
    assert safe_str("  SIA322 ") == "SIA322"
    assert safe_str("   ") is None
    assert safe_str(0) == "0"
