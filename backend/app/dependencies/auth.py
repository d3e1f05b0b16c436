# app/dependencies/auth.py
from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.database import get_db
from app.core.errors import AuthenticationError
from app.services.users import resolve_from_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    """
    Validates:
      - Authorization: Bearer <token>
      - token signature + exp
      - user still exists
    Returns:
      - Identity (never the ORM row)

    Missing/garbled header is an authentication failure (401), never a 403.
    """
    if not creds or creds.scheme.lower() != "bearer" or not creds.credentials:
        raise AuthenticationError()

    return resolve_from_token(db, creds.credentials)
