"""Bearer-token helpers.

Tokens are issued by the authentication service; this backend only verifies them.
create_access_token exists for tooling and tests.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from duebook.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an HS256 token whose `sub` claim is the user id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the `sub` claim, or None if the token is expired or invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError:
        logger.warning("Rejected invalid access token")
        return None
    return payload.get("sub")
