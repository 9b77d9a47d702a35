"""
Access token utilities
Tokens are issued by the external auth service; this module verifies them
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from jose import JWTError, ExpiredSignatureError, jwt

from mentorhub.core.config import Settings, settings as default_settings
from mentorhub.core.exceptions import AuthenticationError


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    app_settings: Optional[Settings] = None
) -> str:
    """
    Create a JWT access token

    Args:
        data: Dictionary of claims to encode in token
        expires_delta: Optional custom expiration time
        app_settings: Settings holding the signing key

    Returns:
        Encoded JWT token string
    """
    cfg = app_settings or default_settings
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=cfg.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "iat": datetime.utcnow(),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        cfg.JWT_SECRET_KEY,
        algorithm=cfg.JWT_ALGORITHM
    )


def decode_token(token: str, app_settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Decode and verify a JWT token

    Raises:
        AuthenticationError: If the token is expired or invalid
    """
    cfg = app_settings or default_settings
    try:
        return jwt.decode(
            token,
            cfg.JWT_SECRET_KEY,
            algorithms=[cfg.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        raise AuthenticationError(
            message="Your access token has expired. Please log in again.",
            error_code="TOKEN_EXPIRED"
        )
    except JWTError:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code="INVALID_TOKEN"
        )


def get_subject(payload: Dict[str, Any]) -> int:
    """Extract the user id from an access token payload"""
    if payload.get("type") != "access":
        raise AuthenticationError(
            message="Invalid token type",
            error_code="INVALID_TOKEN"
        )

    try:
        return int(payload.get("sub"))
    except (ValueError, TypeError):
        raise AuthenticationError()
