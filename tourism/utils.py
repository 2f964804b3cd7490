import re
from typing import Optional

from .errors import ValidationFailed

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email) -> str:
    return str(email).strip().lower() if email else ""


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def require_email(email) -> str:
    """Normalize ``email`` and reject anything that is not name@domain.tld."""
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        raise ValidationFailed("Invalid email format (expected name@domain.com)")
    return normalized


def default_username(email: str) -> str:
    return email.split("@")[0]


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationFailed("Rating must be a whole number between 1 and 5")
    if rating < 1 or rating > 5:
        raise ValidationFailed("Rating must be between 1 and 5")
    return rating


def clean_review_text(text) -> Optional[str]:
    if text is None:
        return None
    cleaned = str(text).strip()
    return cleaned or None
