# app/models/user.py
from sqlalchemy import Column, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import relationship

from app.core.base import Base
from app.models.enums import Role


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # Always stored trimmed + lowercased; uniqueness is case-insensitive by construction.
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # No role-change operation exists; set once at signup.
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda e: [r.value for r in e]),
        nullable=False,
        default=Role.DENTIST,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # user (dentist) → passports they own
    passports = relationship(
        "Passport",
        back_populates="dentist",
        foreign_keys="Passport.dentist_id",
    )
