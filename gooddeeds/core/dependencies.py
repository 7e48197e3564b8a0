import logging
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from gooddeeds.core.config import JWT_ISSUER, JWT_SIGN_KEY


logger = logging.getLogger(__name__)
security = HTTPBearer()


class UserContext(BaseModel):
    """The signed-in user, passed explicitly to every chat/friendship operation."""

    user_id: str
    email: Optional[str] = None


def decode_token(token: str) -> UserContext:
    """Verify a Supabase access token and return who it belongs to.

    Raises `jwt.InvalidTokenError` (or its `ExpiredSignatureError` subclass)
    when the token cannot be trusted.
    """
    payload = jwt.decode(
        token,
        JWT_SIGN_KEY,
        algorithms=["HS256"],
        issuer=JWT_ISSUER,
        options={"verify_aud": False},
        leeway=60,
    )

    user_id = payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token has no subject")

    return UserContext(user_id=str(user_id), email=payload.get("email"))


def verify_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UserContext:
    try:
        return decode_token(credentials.credentials)

    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")

    except jwt.InvalidTokenError as e:
        logger.warning(f"jwt_verification_failed error={e}")
        raise HTTPException(status_code=401, detail="Invalid token")
