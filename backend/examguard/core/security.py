"""
Bearer token verification.

Tokens are issued by the identity provider; the API only verifies them and
extracts the caller's uid (``sub``) and email. ``create_access_token`` mints
compatible tokens for local tooling and tests.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import jwt
from fastapi.security import HTTPBearer

from .config import settings
from .exceptions import Unauthenticated

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> Identity:
        ...


class JWTIdentityVerifier:
    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token has expired")
        except jwt.InvalidTokenError:
            raise Unauthenticated()

        user_id = payload.get("sub")
        if not user_id:
            raise Unauthenticated("Invalid token payload")

        return Identity(user_id=str(user_id), email=payload.get("email"))


def create_access_token(user_id: str, email: Optional[str] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": user_id, "exp": expire}
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


identity_verifier = JWTIdentityVerifier(settings.secret_key, settings.algorithm)
