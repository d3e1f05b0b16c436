# app/models/enums.py
from __future__ import annotations

import enum


class Role(str, enum.Enum):
    ADMIN = "Admin"
    DENTIST = "Dentist"
    PATIENT = "Patient"

    @classmethod
    def parse(cls, value: object) -> "Role | None":
        if isinstance(value, cls):
            return value
        for role in cls:
            if role.value == value:
                return role
        return None


class PassportStatus(str, enum.Enum):
    ACTIVE = "Active"
    ARCHIVED = "Archived"


class ImplantType(str, enum.Enum):
    TITANIUM_STANDARD = "TitaniumStandard"
    TITANIUM_PREMIUM = "TitaniumPremium"
    CERAMIC = "Ceramic"
    ZIRCONIA = "Zirconia"
