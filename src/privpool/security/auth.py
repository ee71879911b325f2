"""Bearer token issuing and verification for pool callers."""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

DEFAULT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 24


def create_access_token(
    account: str,
    secret_key: str,
    algorithm: str = DEFAULT_ALGORITHM,
    expires_delta: Optional[timedelta] = None,
) -> Tuple[str, datetime]:
    """
    Create a JWT access token naming the caller's account.

    Returns:
        tuple: (token, expiry_datetime)

    Raises:
        ValueError: If no secret key is configured or account is empty
    """
    if not secret_key:
        raise ValueError("A signing secret is required to issue tokens")
    if not account:
        raise ValueError("Account must be non-empty")

    if expires_delta is None:
        expires_delta = timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    to_encode = {
        "sub": account,
        "exp": expire,
        "iat": now,
    }

    encoded_jwt = jwt.encode(to_encode, secret_key, algorithm=algorithm)
    return encoded_jwt, expire


def verify_access_token(
    token: str, secret_key: str, algorithm: str = DEFAULT_ALGORITHM
) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT access token.

    Returns:
        Dictionary with token payload if valid, None if invalid/expired
    """
    if not secret_key:
        return None
    try:
        payload = jwt.decode(
            token, secret_key, algorithms=[algorithm], options={"require": ["sub", "exp"]}
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if not isinstance(payload.get("sub"), str) or not payload["sub"]:
        return None
    return payload
