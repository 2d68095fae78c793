import re
import secrets
from typing import Any, Optional

# ASCII only: other Unicode digits are not valid E.164.
_NON_DIGITS = re.compile(r"[^0-9]+")


def clean(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def normalize_email(value: Any) -> str:
    return clean(value).lower()


def to_e164(value: Any) -> str:
    """
    Format a North American number as E.164.

    Only +1 numbers are accepted: 10 digits, or 11 digits with a leading 1.
    Anything else returns "" so the caller treats the phone as missing.
    """
    if value is None or isinstance(value, bool):
        return ""
    digits = _NON_DIGITS.sub("", str(value))
    if len(digits) == 11 and digits.startswith("1"):
        return "+1" + digits[1:]
    if len(digits) == 10:
        return "+1" + digits
    return ""


def client_ip(forwarded_for: Optional[str], remote_addr: Optional[str]) -> Optional[str]:
    """First hop of X-Forwarded-For, else the socket peer, else None."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return remote_addr or None


def secret_matches(provided: Optional[str], expected: str) -> bool:
    # An unset secret must never authorize anything.
    if not expected or provided is None:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
