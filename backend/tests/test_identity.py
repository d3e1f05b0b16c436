# tests/test_identity.py
"""
Unit tests for the Identity model.

These tests verify:
- Mapping a User row to an Identity
- Role flags
- Identity debug output safety

Tests do NOT require database access.
"""
from __future__ import annotations

import dataclasses

import pytest

from app.auth.identity import Identity
from app.models.enums import Role
from app.models.user import User


def test_from_user_maps_fields():
    user = User(id=7, email="d@x.com", password_hash="x", role=Role.DENTIST)
    identity = Identity.from_user(user)

    assert identity == Identity(id=7, email="d@x.com", role=Role.DENTIST)
    assert identity.is_dentist is True
    assert identity.is_admin is False


def test_from_user_accepts_raw_role_string():
    user = User(id=1, email="a@x.com", password_hash="x", role="Admin")
    assert Identity.from_user(user).role is Role.ADMIN


def test_from_user_rejects_unknown_role():
    user = User(id=1, email="a@x.com", password_hash="x", role="Superuser")
    with pytest.raises(ValueError):
        Identity.from_user(user)


def test_identity_is_immutable():
    identity = Identity(id=1, email="a@x.com", role=Role.PATIENT)
    with pytest.raises(dataclasses.FrozenInstanceError):
        identity.role = Role.ADMIN  # type: ignore[misc]


def test_debug_dict_has_no_secrets():
    identity = Identity(id=3, email="p@x.com", role=Role.PATIENT)
    assert identity.to_debug_dict() == {"id": 3, "email": "p@x.com", "role": "Patient"}
