# app/services/users.py
"""
Credential store access + authentication.

Responsibilities:
- User lookup by email or id (the credential store)
- Signup: role check, password policy, duplicate detection, hashing
- Login: credential verification without revealing which check failed
- Resolving a bearer token to an Identity
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.errors import (
    DuplicateIdentity,
    IdentityNotFound,
    InvalidCredential,
    InvalidRole,
    ValidationError,
    WeakCredential,
)
from app.core.password_policy import ensure_strong_password
from app.core.security import burn_password_check, hash_password, verify_access_token, verify_password
from app.models.enums import Role
from app.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Look up a user by email address (case-insensitive)."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def register_credential(db: Session, email: str, password: str, role: Role | str = Role.DENTIST) -> User:
    """
    Create a new user.

    Raises:
        InvalidRole: role is not Admin/Dentist/Patient (password is fine)
        WeakCredential: password fails the policy (role is fine)
        ValidationError: both of the above, every field listed
        DuplicateIdentity: the email is already registered
    """
    failures: list[ValidationError] = []

    parsed_role = Role.parse(role)
    if parsed_role is None:
        failures.append(InvalidRole(role))

    try:
        ensure_strong_password(password)
    except WeakCredential as e:
        failures.append(e)

    if len(failures) == 1:
        raise failures[0]
    if failures:
        raise ValidationError(
            [err for f in failures for err in f.errors],
            details={k: v for f in failures for k, v in (f.details or {}).items()},
        )

    normalized_email = normalize_email(email)
    if get_user_by_email(db, normalized_email):
        raise DuplicateIdentity()

    user = User(
        email=normalized_email,
        password_hash=hash_password(password),
        role=parsed_role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup; the unique index is authoritative.
        db.rollback()
        raise DuplicateIdentity()
    db.refresh(user)

    logger.info("Registered user: id=%s, email=%s, role=%s", user.id, normalized_email, parsed_role.value)
    return user


def authenticate_credential(db: Session, email: str, password: str) -> User:
    """
    Return the user for a valid email/password pair.

    Unknown email and wrong password raise the same InvalidCredential.
    """
    normalized_email = normalize_email(email)
    user = get_user_by_email(db, normalized_email)
    if user is None:
        burn_password_check(password or "")
        logger.info("Login failed: email=%s", normalized_email)
        raise InvalidCredential()

    if not verify_password(password or "", user.password_hash):
        logger.info("Login failed: email=%s", normalized_email)
        raise InvalidCredential()

    logger.info("Login succeeded: id=%s", user.id)
    return user


def resolve_from_token(db: Session, token: str) -> Identity:
    """
    Map a bearer token to an Identity.

    Propagates TokenExpired / TokenMalformed; raises IdentityNotFound if the
    user was removed after the token was issued.
    """
    claims = verify_access_token(token)
    user = get_user_by_id(db, claims.identity_id)
    if user is None:
        logger.info("Token subject no longer exists: id=%s", claims.identity_id)
        raise IdentityNotFound()
    return Identity.from_user(user)
