"""
Supabase session verification.
The frontend signs users in with Supabase Auth and sends the access token
as a Bearer header; the token is an HS256 JWT signed with the project's
JWT secret, with the auth user UUID in "sub".
"""

import os
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

# ─── Config ───────────────────────────────────────────────────────────────────

SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
ALGORITHM = "HS256"

_bearer = HTTPBearer(auto_error=False)


# ─── Token helpers ─────────────────────────────────────────────────────────────

def decode_token(token: str) -> Optional[dict]:
    """Decode a Supabase access token. Returns payload dict or None if invalid/expired."""
    if not SUPABASE_JWT_SECRET:
        return None
    try:
        return jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except (JWTError, ValueError, TypeError):
        return None


# ─── Dependencies ──────────────────────────────────────────────────────────────

def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> dict:
    """
    Verified token payload. Besides "sub" a Supabase token carries "email",
    "user_metadata" (name, avatar) and "app_metadata" (sign-in provider).
    """
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    if not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no subject")
    return payload


def get_current_user_id(claims: dict = Depends(get_current_claims)) -> str:
    return str(claims["sub"])


def require_same_user(user_id: str, current_user_id: str) -> None:
    if user_id != current_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot access another user's data")
