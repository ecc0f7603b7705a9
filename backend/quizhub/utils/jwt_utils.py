"""
JWT token utilities for authentication
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
import jwt
from jwt.exceptions import InvalidTokenError


# Load JWT configuration from environment
SECRET_KEY = os.environ.get("JWT_SECRET")
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
EXPIRATION_HOURS = int(os.environ.get("JWT_EXPIRATION_HOURS", 24))


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token

    Args:
        data: Claims to encode; ``sub`` is the user id and ``role`` the user's role
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if not SECRET_KEY:
        raise ValueError("JWT_SECRET environment variable is not set")

    to_encode = data.copy()
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=EXPIRATION_HOURS))

    to_encode.update({
        "exp": expire,
        "iat": issued_at,
    })

    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """
    Decode and verify a JWT token

    Returns:
        Decoded token data or None if invalid
    """
    if not SECRET_KEY:
        raise ValueError("JWT_SECRET environment variable is not set")

    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except InvalidTokenError:
        return None
