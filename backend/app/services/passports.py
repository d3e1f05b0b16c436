# app/services/passports.py
"""
Passport lifecycle: create, read, list, update, delete, export.

Every operation that targets one record checks existence first and permission
second, so a caller without access to an existing passport gets Forbidden and
a caller asking for a missing one gets NotFound. Keep that order.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import pydantic
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.auth.policy import Operation, authorize, list_scope
from app.core.config import settings
from app.core.errors import FieldError, Forbidden, NotFound, ValidationError
from app.models.enums import ImplantType, PassportStatus, Role
from app.models.passport import Passport, compute_age
from app.schemas.passport import PassportIn
from app.services.users import get_user_by_id

logger = logging.getLogger(__name__)

# implant_details key -> Passport column
_DETAIL_COLUMNS = {
    "brand": "implant_brand",
    "lot_number": "implant_lot_number",
    "implant_date": "implant_date",
    "position": "implant_position",
    "diameter": "implant_diameter",
    "length": "implant_length",
    "notes": "implant_notes",
}

# Set once at create, never through a patch.
_IMMUTABLE_FIELDS = ("dentist_id",)


# -----------------------------
# Validation
# -----------------------------
def _field_name(loc: tuple) -> str:
    return ".".join(str(p) for p in loc) or "body"


def validate_passport_payload(payload: Any) -> PassportIn:
    """
    Validate a full passport payload, collecting every violated field.
    """
    if not isinstance(payload, dict):
        raise ValidationError([FieldError("body", "must be a JSON object")])
    try:
        return PassportIn.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = [FieldError(_field_name(tuple(err.get("loc") or ())), err.get("msg") or "invalid") for err in e.errors()]
        raise ValidationError(errors)


def _patient_link_error(db: Session, patient_id: Any) -> Optional[FieldError]:
    if patient_id is None:
        return None
    if isinstance(patient_id, bool) or not isinstance(patient_id, int):
        # Type errors are reported by the schema.
        return None
    user = get_user_by_id(db, patient_id)
    if user is None:
        return FieldError("patient_id", "no such user")
    if Role.parse(user.role) is not Role.PATIENT:
        return FieldError("patient_id", "must reference a Patient account")
    return None


def _validate(db: Session, payload: Any, *, check_patient: bool = True) -> PassportIn:
    """
    Schema validation plus the patient link check, reported together.
    """
    errors: list[FieldError] = []
    data: Optional[PassportIn] = None
    try:
        data = validate_passport_payload(payload)
    except ValidationError as e:
        errors.extend(e.errors)

    if check_patient and isinstance(payload, dict) and "patient_id" not in {e.field for e in errors}:
        patient_id = data.patient_id if data is not None else payload.get("patient_id")
        link_error = _patient_link_error(db, patient_id)
        if link_error:
            errors.append(link_error)

    if errors:
        raise ValidationError(errors)
    return data


def _current_values(passport: Passport) -> dict[str, Any]:
    details = passport.implant_details
    return {
        "patient_name": passport.patient_name,
        "date_of_birth": passport.date_of_birth,
        "implant_type": passport.implant_type,
        "implant_details": dict(details),
        "status": passport.status,
        "patient_id": passport.patient_id,
    }


def _merge_patch(current: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    merged = dict(current)
    for key, value in patch.items():
        if key not in PassportIn.model_fields:
            continue
        if key == "implant_details" and isinstance(value, dict):
            merged["implant_details"] = {**current["implant_details"], **value}
        else:
            merged[key] = value
    return merged


def _assign(passport: Passport, data: PassportIn) -> None:
    passport.patient_name = data.patient_name
    passport.date_of_birth = data.date_of_birth
    passport.implant_type = data.implant_type
    passport.patient_id = data.patient_id
    details = data.implant_details.model_dump()
    for key, column in _DETAIL_COLUMNS.items():
        setattr(passport, column, details.get(key))


def _get_existing(db: Session, passport_id: int) -> Passport:
    passport = db.query(Passport).filter(Passport.id == passport_id).first()
    if not passport:
        raise NotFound("Passport not found")
    return passport


# -----------------------------
# Operations
# -----------------------------
def create_passport(db: Session, identity: Identity, payload: Any) -> Passport:
    authorize(identity, Operation.CREATE_PASSPORT)

    data = _validate(db, payload)

    passport = Passport(dentist_id=identity.id)  # ✅ ownership
    _assign(passport, data)
    passport.status = data.status or PassportStatus.ACTIVE

    db.add(passport)
    db.commit()
    db.refresh(passport)

    logger.info("Created passport: id=%s, dentist_id=%s", passport.id, identity.id)
    return passport


def get_passport(db: Session, identity: Identity, passport_id: int) -> Passport:
    passport = _get_existing(db, passport_id)
    authorize(identity, Operation.READ_PASSPORT, passport.dentist_id)
    return passport


@dataclass(frozen=True)
class PassportPage:
    items: list[Passport]
    current_page: int
    total_pages: int
    total_count: int


def list_passports(
    db: Session,
    identity: Identity,
    page: int = 1,
    page_size: Optional[int] = None,
) -> PassportPage:
    scope = list_scope(identity)
    if scope is None:
        logger.info("Access denied: op=%s user=%s", Operation.LIST_PASSPORTS.value, identity.id)
        raise Forbidden()

    page_size = settings.DEFAULT_PAGE_SIZE if page_size is None else page_size
    errors: list[FieldError] = []
    if page < 1:
        errors.append(FieldError("page", "must be >= 1"))
    if page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
        errors.append(FieldError("page_size", f"must be between 1 and {settings.MAX_PAGE_SIZE}"))
    if errors:
        raise ValidationError(errors)

    qry = db.query(Passport).filter_by(**scope.as_filter())
    total = qry.count()
    items = (
        qry.order_by(desc(Passport.created_at), desc(Passport.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    return PassportPage(
        items=items,
        current_page=page,
        total_pages=math.ceil(total / page_size),
        total_count=total,
    )


def update_passport(db: Session, identity: Identity, passport_id: int, patch: Any) -> Passport:
    passport = _get_existing(db, passport_id)
    authorize(identity, Operation.UPDATE_PASSPORT, passport.dentist_id)

    if not isinstance(patch, dict):
        raise ValidationError([FieldError("body", "must be a JSON object")])

    patch = dict(patch)
    for key in _IMMUTABLE_FIELDS:
        if key in patch:
            patch.pop(key)
            logger.info("Ignoring immutable field in passport patch: id=%s field=%s", passport.id, key)

    # Validate the merged result so untouched fields keep their values and touched ones obey create rules.
    data = _validate(
        db,
        _merge_patch(_current_values(passport), patch),
        check_patient="patient_id" in patch,
    )

    _assign(passport, data)
    # No transition guard: status may be written directly, including Archived -> Active.
    if data.status is not None:
        passport.status = data.status

    db.commit()
    db.refresh(passport)

    logger.info("Updated passport: id=%s, by user=%s", passport.id, identity.id)
    return passport


def delete_passport(db: Session, identity: Identity, passport_id: int) -> None:
    passport = _get_existing(db, passport_id)
    authorize(identity, Operation.DELETE_PASSPORT, passport.dentist_id)

    db.delete(passport)
    db.commit()

    logger.info("Deleted passport: id=%s, by user=%s", passport_id, identity.id)


# -----------------------------
# Export
# -----------------------------
@dataclass(frozen=True)
class ImplantDetailsSnapshot:
    brand: str
    lot_number: str
    implant_date: date
    position: str
    diameter: float
    length: float
    notes: Optional[str] = None


@dataclass(frozen=True)
class PassportSnapshot:
    """Read-only projection handed to the PDF renderer."""

    id: int
    patient_name: str
    date_of_birth: date
    patient_age: Optional[int]
    implant_type: ImplantType
    implant_details: ImplantDetailsSnapshot
    status: PassportStatus
    dentist_id: int
    dentist_email: Optional[str]
    created_at: datetime

    @classmethod
    def from_passport(cls, passport: Passport) -> PassportSnapshot:
        dentist = passport.dentist
        return cls(
            id=passport.id,
            patient_name=passport.patient_name,
            date_of_birth=passport.date_of_birth,
            patient_age=compute_age(passport.date_of_birth),
            implant_type=passport.implant_type,
            implant_details=ImplantDetailsSnapshot(**passport.implant_details),
            status=passport.status,
            dentist_id=passport.dentist_id,
            dentist_email=dentist.email if dentist else None,
            created_at=passport.created_at,
        )


def export_passport(db: Session, identity: Identity, passport_id: int) -> PassportSnapshot:
    passport = _get_existing(db, passport_id)
    authorize(identity, Operation.EXPORT_PASSPORT, passport.dentist_id)

    logger.info("Exported passport: id=%s, by user=%s", passport.id, identity.id)
    return PassportSnapshot.from_passport(passport)
