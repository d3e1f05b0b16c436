from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ImplantType, PassportStatus, Role


# -----------------------------
# Input (validated inside the service, see services/passports.py)
# -----------------------------
class ImplantDetailsIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    brand: str = Field(min_length=1, max_length=255)
    lot_number: str = Field(min_length=1, max_length=100)
    implant_date: date
    position: str = Field(min_length=1, max_length=50)
    diameter: float = Field(ge=0.1)  # mm
    length: float = Field(ge=0.5)  # mm
    notes: Optional[str] = None


class PassportIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    patient_name: str = Field(min_length=1, max_length=255)
    date_of_birth: date
    implant_type: ImplantType
    implant_details: ImplantDetailsIn
    status: Optional[PassportStatus] = None
    patient_id: Optional[int] = None


# -----------------------------
# Output
# -----------------------------
class DentistOut(BaseModel):
    id: int
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class ImplantDetailsOut(BaseModel):
    brand: str
    lot_number: str
    implant_date: date
    position: str
    diameter: float
    length: float
    notes: Optional[str] = None


class PassportOut(BaseModel):
    id: int
    patient_name: str
    date_of_birth: date
    patient_age: Optional[int] = None
    implant_type: ImplantType
    implant_details: ImplantDetailsOut
    status: PassportStatus
    dentist_id: int
    dentist: Optional[DentistOut] = None
    patient_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PassportListOut(BaseModel):
    items: List[PassportOut]
    current_page: int
    total_pages: int
    total_count: int
