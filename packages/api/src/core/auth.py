# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Password hashing (bcrypt), bearer token issue/decode (HS256 JWT) and OTP
generation/checking. Used by the identity service and by
``middleware/auth.py``; nothing here touches the database.
"""

import secrets
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from .config import settings

OTP_DIGITS = 6


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Hash with bcrypt at the library's default cost."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ---------------------------------------------------------------------------
# Bearer tokens
# ---------------------------------------------------------------------------


def issue_access_token(user_id: int, now: datetime | None = None) -> str:
    """Sign a token carrying ``user_id`` and a fractional-second ``iat``.

    ``exp`` is added unless ACCESS_TOKEN_TTL_MINUTES is 0.
    """
    now = now or datetime.now(UTC)
    claims: dict = {"user_id": user_id, "iat": now.timestamp()}
    if settings.ACCESS_TOKEN_TTL_MINUTES > 0:
        claims["exp"] = now + timedelta(minutes=settings.ACCESS_TOKEN_TTL_MINUTES)
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry. Raises ``jwt.InvalidTokenError`` subclasses."""
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["iat", "user_id"]},
    )


def is_revoked(issued_at: float, last_logout_at: datetime | None) -> bool:
    """A token is revoked when the user logged out after it was issued."""
    if last_logout_at is None:
        return False
    if last_logout_at.tzinfo is None:
        last_logout_at = last_logout_at.replace(tzinfo=UTC)
    return last_logout_at.timestamp() > issued_at


# ---------------------------------------------------------------------------
# One-time passwords
# ---------------------------------------------------------------------------


def generate_otp() -> str:
    """Six random decimal digits from the OS CSPRNG."""
    return f"{secrets.randbelow(10**OTP_DIGITS):0{OTP_DIGITS}d}"


def otp_matches(
    submitted: str,
    stored: str | None,
    generated_at: datetime | None,
    now: datetime | None = None,
) -> bool:
    """Constant-time OTP comparison plus validity window check."""
    if not stored or generated_at is None:
        return False
    if not secrets.compare_digest(submitted.strip().encode(), stored.encode()):
        return False
    now = now or datetime.now(UTC)
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=UTC)
    return now - generated_at <= timedelta(minutes=settings.OTP_VALIDITY_MINUTES)
