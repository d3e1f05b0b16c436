# app/routes/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.database import get_db
from app.core.errors import IdentityNotFound
from app.core.security import create_access_token
from app.dependencies.auth import get_current_identity
from app.schemas.auth import AuthOut, LoginIn, SignupIn
from app.schemas.user import UserOut
from app.services.users import authenticate_credential, get_user_by_id, register_credential

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthOut, status_code=201)
def signup(payload: SignupIn, db: Session = Depends(get_db)):
    user = register_credential(db, payload.email, payload.password, payload.role)
    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = authenticate_credential(db, payload.email, payload.password)
    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user": user,
    }


@router.get("/profile", response_model=UserOut)
def profile(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = get_user_by_id(db, identity.id)
    if user is None:
        raise IdentityNotFound()
    return user
