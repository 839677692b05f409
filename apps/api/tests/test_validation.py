from datetime import date

import pytest
from fastapi import HTTPException

from linguist.validation import (
    optional_text,
    parse_birthdate,
    require_text,
    validate_avatar,
    validate_credentials,
)

TODAY = date(2025, 6, 15)


def test_birthdate_within_last_five_years():
    assert parse_birthdate("2023-02-10", today=TODAY) == date(2023, 2, 10)
    assert parse_birthdate("2020-06-15", today=TODAY) == date(2020, 6, 15)
    assert parse_birthdate("2025-06-15", today=TODAY) == TODAY


@pytest.mark.parametrize(
    "value",
    ["", None, "2023/02/10", "10-02-2023", "2023-2-1", "2023-02-30", "2025-06-16", "2020-06-14"],
)
def test_birthdate_rejections(value):
    with pytest.raises(HTTPException) as exc:
        parse_birthdate(value, today=TODAY)
    assert exc.value.status_code == 400
    assert "YYYY-MM-DD" in exc.value.detail


def test_birthdate_leap_day_today():
    assert parse_birthdate("2019-02-28", today=date(2024, 2, 29)) == date(2019, 2, 28)


def test_required_and_optional_text():
    assert require_text("  dog ", "Word") == "dog"
    with pytest.raises(HTTPException) as exc:
        require_text("   ", "Word")
    assert exc.value.detail == "Word is required"
    assert optional_text("  ") is None
    assert optional_text(" said it twice ") == "said it twice"


def test_avatar_must_be_offered_glyph():
    assert validate_avatar("👧") == "👧"
    with pytest.raises(HTTPException):
        validate_avatar("🐙")


def test_credentials_normalize_email():
    assert validate_credentials(" Parent@Example.com ", "secret1") == "parent@example.com"


@pytest.mark.parametrize(
    "email,password,confirm,detail",
    [
        ("", "secret1", None, "Please enter your email address"),
        ("not-an-email", "secret1", None, "Please enter a valid email address"),
        ("parent@example.com", "", None, "Password is required"),
        ("parent@example.com", "abc", None, "Password must be at least 6 characters"),
        ("parent@example.com", "secret1", "secret2", "Passwords do not match"),
    ],
)
def test_credential_errors(email, password, confirm, detail):
    with pytest.raises(HTTPException) as exc:
        validate_credentials(email, password, confirm_password=confirm, sign_up=True)
    assert exc.value.detail == detail
