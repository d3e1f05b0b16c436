# app/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field

from app.schemas.user import UserOut


class SignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    # Validated against the Role enum in the service so an unknown role is InvalidRole, not a schema error.
    role: str = "Dentist"


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class AuthOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
