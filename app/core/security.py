"""
JWT helpers for the authenticated caller identity.

Tokens are issued by the surrounding application; this service only needs to
verify them and read the user id from the ``sub`` claim.
"""
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.core.config import settings
from app.core.time_utils import utc_now


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token carrying ``data`` as claims."""
    to_encode = data.copy()
    expire = utc_now() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str, token_type: str) -> Dict[str, Any]:
    """
    Decode and validate a token.

    Raises:
        jose.ExpiredSignatureError: token has expired
        jose.JWTError: bad signature, malformed token or wrong token type
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    if payload.get("type") != token_type:
        raise JWTError(f"Expected {token_type} token")
    return payload
