"""Local session-token checks.

The client only reads the token's claims to decide whether it still considers
itself logged in. Signatures are verified by the server alone.
"""

import time
from typing import Any

import jwt

EXPIRING_SOON_SECONDS = 5 * 60


def parse_token(token: str | None) -> dict[str, Any] | None:
    """Return the unverified claims of a JWT, or None when it cannot be parsed."""
    if not token:
        return None
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    return claims if isinstance(claims, dict) else None


def get_token_expiry(token: str | None) -> float | None:
    """Expiry as a Unix timestamp in seconds, or None when absent or unreadable."""
    claims = parse_token(token)
    if not claims:
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return float(exp)


def time_until_expiry(token: str | None, now: float | None = None) -> float:
    """Seconds left before expiry; 0 when unknown."""
    expiry = get_token_expiry(token)
    if expiry is None:
        return 0.0
    return expiry - (time.time() if now is None else now)


def is_token_expired(token: str | None, now: float | None = None) -> bool:
    """True for a missing, unparsable or expired token."""
    if get_token_expiry(token) is None:
        return True
    return time_until_expiry(token, now) <= 0


def is_token_expiring_soon(token: str | None, now: float | None = None) -> bool:
    """True while the token is valid but has less than five minutes left."""
    remaining = time_until_expiry(token, now)
    return 0 < remaining < EXPIRING_SOON_SECONDS
