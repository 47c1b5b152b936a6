import pytest

from app.core.exceptions import ValidationError
from app.core.utils import normalize_mobile, normalize_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9812345678", "+9779812345678"),
        ("9712345678", "+9779712345678"),
        ("981-234-5678", "+9779812345678"),
        ("(981) 234 5678", "+9779812345678"),
        ("9779812345678", "+9779812345678"),
        ("+9779812345678", "+9779812345678"),
        ("+14155550123", "+14155550123"),
    ],
)
def test_normalize_mobile(raw, expected):
    assert normalize_mobile(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "12345", "0123456789", "+12ab345678", "+1234567", "+1234567890123456", "abc"],
)
def test_normalize_mobile_rejects_malformed(raw):
    with pytest.raises(ValidationError):
        normalize_mobile(raw)


@pytest.mark.parametrize("raw", ["9812345678", "977 981 234 5678", "+447700900123"])
def test_normalize_is_idempotent(raw):
    once = normalize_mobile(raw)
    assert normalize_mobile(once) == once


def test_normalize_phone_uses_given_country():
    assert normalize_phone("2025550123", "1", ["20"]) == "+12025550123"


@pytest.mark.parametrize(
    "raw",
    [
        "+٩٧٧٩٨١٢٣٤٥٦٧٨",  # Arabic-Indic digits
        "٩٨١٢٣٤٥٦٧٨",
        "९८१२३४५६७८",  # Devanagari digits
        "+９７７９８１２３４５６７８",  # fullwidth digits
    ],
)
def test_normalize_mobile_rejects_non_ascii_digits(raw):
    with pytest.raises(ValidationError):
        normalize_mobile(raw)
