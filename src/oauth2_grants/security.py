"""Small security helpers shared by the grant services."""

from __future__ import annotations

import hmac
import secrets


def redact(value: str | None) -> str:
    """Redact a potentially sensitive value for safe logging.

    Returns:
        "***" if value is non-empty, "<empty>" if empty/None
    """
    if value is None or value == "":
        return "<empty>"
    return "***"


def constant_time_equals(a: str | None, b: str | None) -> bool:
    """Compare two strings in constant time.

    None only equals None.
    """
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return hmac.compare_digest(a.encode(), b.encode())


def generate_state(nbytes: int = 16) -> str:
    """Generate a random OAuth2 ``state`` value for CSRF protection."""
    return secrets.token_hex(nbytes)
