"""JWT utilities for resolving the acting user.

Responsibilities:
- Create HS256-signed access tokens carrying a `user_id` claim.
- Resolve the current user for FastAPI routes, raising `AuthenticationException`
  when no token is sent and `InvalidTokenException` when it cannot be trusted.
- Expose the resolved user on `request.state` for the access log.
"""

# ============================================
# Imports and Dependencies
# ============================================
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationException, InvalidTokenException
from app.modules.users.models import User

logger = logging.getLogger(__name__)

# Missing credentials are reported through AuthenticationException instead of FastAPI's default.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


# ============================================
# Token Data Model
# ============================================
class TokenData(BaseModel):
    """
    Schema to store token data.
    """

    id: Optional[int] = None


# ============================================
# Token Creation Function
# ============================================
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token signed with the shared secret.

    - Clones payload, normalizes user_id to int, and sets exp claim.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})

    if "user_id" in to_encode:
        try:
            to_encode["user_id"] = int(to_encode["user_id"])
        except (TypeError, ValueError):
            logger.error(f"Invalid user_id format: {to_encode['user_id']}")
            raise ValueError("Invalid user_id format")

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


# ============================================
# Token Verification Function
# ============================================
def verify_access_token(token: str) -> TokenData:
    """Verify JWT access token (exp/user_id) and return TokenData or raise InvalidTokenException."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"JWT Error: {str(e)}")
        raise InvalidTokenException()

    user_id = payload.get("user_id")
    if user_id is None:
        logger.warning("User ID not found in token payload")
        raise InvalidTokenException()

    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        logger.warning(f"Invalid user_id in token payload: {user_id}")
        raise InvalidTokenException()

    return TokenData(id=user_id)


# ============================================
# Current User Retrieval Function
# ============================================
def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user or raise a 401 application exception."""
    if not token:
        raise AuthenticationException()

    token_data = verify_access_token(token)
    user = db.get(User, token_data.id)
    if user is None:
        raise InvalidTokenException()

    request.state.user = user
    return user
