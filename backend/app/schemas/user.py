from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.enums import Role


class UserOut(BaseModel):
    id: int
    email: str
    role: Role
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
