# app/core/security.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from app.core.config import settings
from app.core.errors import ConfigError, TokenExpired, TokenMalformed

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Constant-time check. A missing or unrecognised hash is a mismatch, not an error.
    """
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except (UnknownHashError, ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return pwd_context.hash("not-a-real-password-0")


def burn_password_check(password: str) -> None:
    """
    Spend the same work as a real verify. Used when the email is unknown so
    login timing does not reveal which accounts exist.
    """
    verify_password(password, _dummy_hash())


# -------------------------
# JWT helpers
# -------------------------
@dataclass(frozen=True)
class TokenClaims:
    identity_id: int
    issued_at: datetime
    expires_at: datetime


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _signing_secret() -> str:
    secret = settings.JWT_SECRET
    if not secret or not secret.strip():
        raise ConfigError("JWT_SECRET must be set (auth is required).")
    return secret


def create_access_token(
    identity_id: int,
    *,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """
    Access token used for API auth: Authorization: Bearer <token>
    subject = the user's id
    """
    secret = _signing_secret()

    issued = now or _now_utc()
    exp = issued + (expires_delta if expires_delta is not None else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload = {
        "sub": str(identity_id),
        "iat": int(issued.timestamp()),
        "exp": int(exp.timestamp()),
    }

    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str) -> dict[str, Any]:
    # Expiry is checked by the caller against an injectable clock.
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_exp": False, "verify_iat": False},
    )


def verify_access_token(token: str, *, now: datetime | None = None) -> TokenClaims:
    """
    Returns the decoded claims or raises TokenExpired / TokenMalformed.
    """
    secret = _signing_secret()

    if not token or not isinstance(token, str):
        raise TokenMalformed()

    try:
        payload = _decode(token, secret)
    except JWTError:
        logger.info("Token rejected: bad signature or encoding")
        raise TokenMalformed()

    sub = payload.get("sub")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if sub is None or not isinstance(iat, int) or not isinstance(exp, int):
        logger.info("Token rejected: missing claims")
        raise TokenMalformed()

    try:
        identity_id = int(str(sub))
    except ValueError:
        logger.info("Token rejected: non-numeric subject")
        raise TokenMalformed()

    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    current = now or _now_utc()
    if current >= expires_at:
        logger.info("Token rejected: expired at %s", expires_at.isoformat())
        raise TokenExpired()

    return TokenClaims(
        identity_id=identity_id,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=expires_at,
    )
