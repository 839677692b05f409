"""Form validation that runs before any backend request is sent."""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from fastapi import HTTPException

from .schemas import CHILD_AVATARS

BIRTHDATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MAX_CHILD_AGE_YEARS = 5


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 on a non-leap target year.
        return day.replace(year=day.year - years, day=28)


def parse_birthdate(value: Optional[str], *, today: Optional[date] = None) -> date:
    """Return the birthdate if it is a YYYY-MM-DD date within the last five years."""

    today = today or date.today()
    message = (
        f"Please enter a valid birthdate (YYYY-MM-DD) within the last {MAX_CHILD_AGE_YEARS} years"
    )
    raw = (value or "").strip()
    if not BIRTHDATE_PATTERN.match(raw):
        raise HTTPException(status_code=400, detail=message)
    try:
        parsed = date.fromisoformat(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=message) from exc
    if parsed > today or parsed < _years_before(today, MAX_CHILD_AGE_YEARS):
        raise HTTPException(status_code=400, detail=message)
    return parsed


def require_text(value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail=f"{label} is required")
    return text


def optional_text(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def validate_avatar(value: str) -> str:
    if value not in CHILD_AVATARS:
        raise HTTPException(status_code=400, detail="Unsupported avatar")
    return value


def validate_email(email: Optional[str]) -> str:
    normalized = (email or "").strip().lower()
    if not normalized:
        raise HTTPException(status_code=400, detail="Please enter your email address")
    if not EMAIL_PATTERN.match(normalized):
        raise HTTPException(status_code=400, detail="Please enter a valid email address")
    return normalized


def validate_credentials(
    email: Optional[str],
    password: Optional[str],
    *,
    confirm_password: Optional[str] = None,
    sign_up: bool = False,
) -> str:
    """Check an email/password pair and return the normalized email."""

    normalized = validate_email(email)
    if not password:
        raise HTTPException(status_code=400, detail="Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )
    if sign_up and password != confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")
    return normalized
