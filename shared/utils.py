import secrets
import string
import time
import re
from datetime import datetime, timezone
from typing import Optional


SKU_ALPHABET = string.digits + string.ascii_uppercase


def generate_random_string(length: int = 32, alphabet: str = string.ascii_letters + string.digits) -> str:
    """Generate a random string of specified length."""
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def generate_sku(category: str, now_ms: Optional[int] = None) -> str:
    """Generate an SKU as PREFIX-TIMESTAMP-RANDOM.

    PREFIX is the first three letters of the category, TIMESTAMP the last six
    digits of the current epoch time in milliseconds and RANDOM three base-36
    characters. The value is not unique by construction and must still pass
    the SKU uniqueness check.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    prefix = category[:3].upper()
    timestamp = str(now_ms)[-6:].zfill(6)
    random_suffix = generate_random_string(3, SKU_ALPHABET)
    return f"{prefix}-{timestamp}-{random_suffix}"


def validate_email(email: str) -> bool:
    """Validate email format."""
    pattern = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
    return re.match(pattern, email) is not None


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes coming back from the store as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert offset-aware input to UTC; naive values are already taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)
