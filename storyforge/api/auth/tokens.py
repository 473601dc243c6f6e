"""JWT token generation and verification.

The `sub` claim carries the user id that owns stories. Tokens are minted by
the identity layer in front of this service (or `cli/issue_token.py` during
development); this module only signs and checks them.
"""

import os
from datetime import datetime, timedelta, timezone

import jwt

# Secret key for signing tokens - must be set in production
SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 30


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token for a user.

    Args:
        user_id: The subject claim (owner of the stories)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Verify a JWT token and return its payload.

    Returns:
        Decoded payload dict if valid, None if invalid/expired/missing a subject
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    if not payload.get("sub"):
        return None
    return payload
