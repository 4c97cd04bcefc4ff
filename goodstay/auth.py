import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt

from .config import ADMIN_JWT_AUDIENCE, ADMIN_JWT_SECRET, ADMIN_ROLE

logger = logging.getLogger(__name__)

security = HTTPBearer()

ALGORITHM = "HS256"


@dataclass
class AdminUser:
    id: str
    email: Optional[str]
    role: str


def extract_role(claims: dict) -> Optional[str]:
    """Role lives in app_metadata (set server side) or user_metadata (legacy accounts)"""
    app_metadata = claims.get("app_metadata") or {}
    user_metadata = claims.get("user_metadata") or {}
    return app_metadata.get("role") or user_metadata.get("role")


def verify_access_token(token: str) -> dict:
    """
    Verify a Supabase-issued access token.

    Returns:
        Decoded claims

    Raises:
        HTTPException(401) if the token is malformed, expired or signed with another key
    """
    if not ADMIN_JWT_SECRET:
        logger.error("❌ ADMIN_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Admin authentication not configured")

    try:
        return jose_jwt.decode(
            token,
            ADMIN_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=ADMIN_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please sign in again.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Admin token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid authentication token") from e


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AdminUser:
    """Dependency for back-office routes: a valid token whose role is admin"""
    claims = verify_access_token(credentials.credentials)

    role = extract_role(claims)
    if role != ADMIN_ROLE:
        logger.warning(f"🚫 Non-admin access attempt by {claims.get('email') or claims.get('sub')}")
        raise HTTPException(status_code=403, detail="Admin access required")

    return AdminUser(id=claims.get("sub", ""), email=claims.get("email"), role=role)
