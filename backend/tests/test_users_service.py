from __future__ import annotations

from datetime import timedelta

import pytest

from app.core.errors import (
    DuplicateIdentity,
    IdentityNotFound,
    InvalidCredential,
    InvalidRole,
    TokenExpired,
    ValidationError,
    WeakCredential,
)
from app.core.security import create_access_token, verify_password
from app.models.enums import Role
from app.models.user import User
from app.services.users import authenticate_credential, register_credential, resolve_from_token


def test_register_then_authenticate(db_session):
    user = register_credential(db_session, "Dentist@Example.com", "Passw0rd", "Dentist")

    assert user.id is not None
    assert user.email == "dentist@example.com"
    assert user.role == Role.DENTIST
    assert user.password_hash != "Passw0rd"
    assert verify_password("Passw0rd", user.password_hash)

    logged_in = authenticate_credential(db_session, "dentist@example.com", "Passw0rd")
    assert logged_in.id == user.id


def test_register_defaults_to_dentist(db_session):
    user = register_credential(db_session, "new@x.com", "Passw0rd")
    assert user.role == Role.DENTIST


def test_duplicate_email_is_case_insensitive(db_session):
    register_credential(db_session, "dup@x.com", "Passw0rd")
    with pytest.raises(DuplicateIdentity):
        register_credential(db_session, "DUP@x.com", "Passw0rd")
    assert db_session.query(User).count() == 1


@pytest.mark.parametrize("password", ["short1", "alllettersnodigit", "12345678"])
def test_weak_password_is_rejected_and_nothing_stored(db_session, password):
    with pytest.raises(WeakCredential):
        register_credential(db_session, "weak@x.com", password)
    assert db_session.query(User).count() == 0


def test_unknown_role_is_rejected(db_session):
    with pytest.raises(InvalidRole) as exc_info:
        register_credential(db_session, "r@x.com", "Passw0rd", "Superuser")
    assert exc_info.value.fields == ["role"]
    assert db_session.query(User).count() == 0


def test_bad_role_and_weak_password_are_reported_together(db_session):
    with pytest.raises(ValidationError) as exc_info:
        register_credential(db_session, "r@x.com", "weak", "Superuser")

    err = exc_info.value
    assert not isinstance(err, (InvalidRole, WeakCredential))
    assert err.status_code == 400
    assert err.fields == ["role", "password", "password"]
    assert err.details == {"code": "WEAK_PASSWORD", "violations": ["min_length", "number"]}
    assert db_session.query(User).count() == 0


def test_login_failures_are_indistinguishable(db_session):
    register_credential(db_session, "known@x.com", "Passw0rd")

    with pytest.raises(InvalidCredential) as wrong_password:
        authenticate_credential(db_session, "known@x.com", "Wr0ngpass")
    with pytest.raises(InvalidCredential) as unknown_email:
        authenticate_credential(db_session, "nobody@x.com", "Passw0rd")

    assert wrong_password.value.message == unknown_email.value.message == "Unauthorized"
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_resolve_from_token_returns_identity(db_session):
    user = register_credential(db_session, "p@x.com", "Passw0rd", Role.PATIENT)
    identity = resolve_from_token(db_session, create_access_token(user.id))

    assert identity.id == user.id
    assert identity.email == "p@x.com"
    assert identity.role is Role.PATIENT


def test_resolve_from_token_for_deleted_user(db_session):
    user = register_credential(db_session, "gone@x.com", "Passw0rd")
    token = create_access_token(user.id)

    db_session.delete(user)
    db_session.commit()

    with pytest.raises(IdentityNotFound):
        resolve_from_token(db_session, token)


def test_resolve_from_expired_token(db_session):
    user = register_credential(db_session, "old@x.com", "Passw0rd")
    token = create_access_token(user.id, expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenExpired):
        resolve_from_token(db_session, token)
