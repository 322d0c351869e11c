"""
Phone normalization tests.
"""

import pytest

from backend.app.domain.phones import normalize_to_e164


@pytest.mark.parametrize("raw,expected", [
    ("5127347426", "+15127347426"),
    ("(512) 734-7426", "+15127347426"),
    ("1-512-734-7426", "+15127347426"),
    ("15127347426.0", "+15127347426"),
    ('"512.734.7426"', "+15127347426"),
    ("+44 20 7946 0958", "+442079460958"),
    ("734-7426", "+7347426"),
    (15127347426, "+15127347426"),
])
def test_normalizes_to_e164(raw, expected):
    assert normalize_to_e164(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "n/a", "+"])
def test_no_digits_is_none(raw):
    assert normalize_to_e164(raw) is None
