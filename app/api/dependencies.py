"""
Shared API dependencies.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, ExpiredSignatureError
from sqlmodel import Session

from app.core.database import get_session
from app.core.logging_config import LogCategory
from app.core.security import verify_token
from app.middleware.request_logging import request_id_ctx
from app.services.config_service import ConfigService

logger = logging.getLogger(LogCategory.SECURITY)

# Tokens are issued by the surrounding application; auto_error=False so a
# missing token gets the same 401 body as an invalid one.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_request_id() -> str:
    """
    Dependency to get the current request ID from context.

    Returns:
        The current request ID, or 'unknown' if not in a request context.
    """
    return request_id_ctx.get()


async def get_current_user_id(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> str:
    """
    Dependency returning the authenticated caller's user id.
    Raises HTTPException with status 401 if authentication fails.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="The request requires valid authorization token.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token is None:
        raise credentials_exception

    try:
        payload = verify_token(token, "access")
    except ExpiredSignatureError:
        logger.info("Expired token presented")
        raise credentials_exception
    except JWTError as e:
        logger.warning("JWT error during token validation", extra={"error": str(e)})
        raise credentials_exception

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise credentials_exception
    return user_id


def get_config_service(
    session: Annotated[Session, Depends(get_session)],
) -> ConfigService:
    return ConfigService(session)
