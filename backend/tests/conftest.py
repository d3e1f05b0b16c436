import copy
import os

# Ensure JWT_SECRET exists before importing app.main (it calls require_jwt_secret() at import time).
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from contextlib import contextmanager
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.identity import Identity
from app.core.base import Base
from app.core import config as app_config
from app.core.security import hash_password

# Import models so they register with SQLAlchemy metadata.
from app.models.enums import Role
from app.models.passport import Passport  # noqa: F401
from app.models.user import User

from app.core.database import get_db
from app.dependencies.auth import get_current_identity

TEST_PASSWORD = "Passw0rd"

PASSPORT_PAYLOAD = {
    "patient_name": "Mario Rossi",
    "date_of_birth": "1980-01-01",
    "implant_type": "Zirconia",
    "implant_details": {
        "brand": "Straumann",
        "lot_number": "L1",
        "implant_date": "2023-05-01",
        "position": "46",
        "diameter": 4.2,
        "length": 10,
    },
}


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def db_session(db_engine):
    # Important: because we use an in-memory SQLite DB with StaticPool, the DB
    # persists across tests. Reset schema per test to avoid cross-test coupling.
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_mutable_settings():
    """
    Tests sometimes tweak global settings (app_config.settings.*). Because that object is
    process-global, we must restore values after each test to avoid cross-test coupling.
    """
    keys = [
        "JWT_SECRET",
        "ACCESS_TOKEN_EXPIRE_MINUTES",
        "PASSWORD_MIN_LENGTH",
        "DEFAULT_PAGE_SIZE",
        "MAX_PAGE_SIZE",
        "ENV",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)


@pytest.fixture()
def app(db_session):
    # Ensure settings has a JWT secret even if imported earlier.
    app_config.settings.JWT_SECRET = app_config.settings.JWT_SECRET or "test_jwt_secret"

    import app.main as main

    fastapi_app = main.app

    def override_get_db():
        yield db_session
    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


def _make_user(db_session, email: str, role: Role) -> User:
    user = User(email=email, password_hash=hash_password(TEST_PASSWORD), role=role)
    db_session.add(user)
    return user


@pytest.fixture()
def users(db_session):
    """
    One user per role plus a second dentist for ownership / isolation tests.
    """
    admin = _make_user(db_session, "admin@example.com", Role.ADMIN)
    dentist = _make_user(db_session, "d@x.com", Role.DENTIST)
    other_dentist = _make_user(db_session, "other@x.com", Role.DENTIST)
    patient = _make_user(db_session, "patient@example.com", Role.PATIENT)
    db_session.commit()
    for u in (admin, dentist, other_dentist, patient):
        db_session.refresh(u)
    return SimpleNamespace(admin=admin, dentist=dentist, other_dentist=other_dentist, patient=patient)


@pytest.fixture()
def identities(users):
    return SimpleNamespace(
        admin=Identity.from_user(users.admin),
        dentist=Identity.from_user(users.dentist),
        other_dentist=Identity.from_user(users.other_dentist),
        patient=Identity.from_user(users.patient),
    )


@pytest.fixture()
def passport_payload():
    return copy.deepcopy(PASSPORT_PAYLOAD)


@pytest.fixture()
def anon_client(app):
    """
    Client with no auth override: requests go through the real bearer-token path.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def client(app, users):
    """
    Default client authenticated as the first dentist.
    """
    identity = Identity.from_user(users.dentist)
    app.dependency_overrides[get_current_identity] = lambda: identity
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_current_identity, None)


@pytest.fixture()
def client_for(app):
    """
    Context manager to create a client authenticated as an arbitrary user.

    Usage:
        with client_for(user) as c:
            ...
    """

    @contextmanager
    def _client_for(user: User):
        identity = Identity.from_user(user)
        previous = app.dependency_overrides.get(get_current_identity)
        app.dependency_overrides[get_current_identity] = lambda: identity
        try:
            with TestClient(app) as c:
                yield c
        finally:
            # Hand the override back to the default `client` fixture if it set one.
            if previous is None:
                app.dependency_overrides.pop(get_current_identity, None)
            else:
                app.dependency_overrides[get_current_identity] = previous

    return _client_for
