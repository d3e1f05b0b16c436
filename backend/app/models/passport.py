from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.base import Base
from app.models.enums import ImplantType, PassportStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_age(date_of_birth: date | None, today: date | None = None) -> int | None:
    if date_of_birth is None:
        return None
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


class Passport(Base):
    __tablename__ = "passports"

    id = Column(Integer, primary_key=True, index=True)

    # ✅ ownership (immutable after create)
    dentist_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    # Optional link to a Patient account
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    patient_name = Column(String(255), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=False)
    implant_type = Column(
        Enum(ImplantType, name="implant_type", values_callable=lambda e: [t.value for t in e]),
        nullable=False,
    )
    status = Column(
        Enum(PassportStatus, name="passport_status", values_callable=lambda e: [s.value for s in e]),
        nullable=False,
        default=PassportStatus.ACTIVE,
    )

    # implant_details, flattened
    implant_brand = Column(String(255), nullable=False)
    implant_lot_number = Column(String(100), nullable=False)
    implant_date = Column(Date, nullable=False)
    implant_position = Column(String(50), nullable=False)
    implant_diameter = Column(Float, nullable=False)
    implant_length = Column(Float, nullable=False)
    implant_notes = Column(Text, nullable=True)

    # Python-side defaults keep sub-second precision for created_at ordering.
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    dentist = relationship("User", back_populates="passports", foreign_keys=[dentist_id])
    patient = relationship("User", foreign_keys=[patient_id])

    @property
    def implant_details(self) -> dict:
        return {
            "brand": self.implant_brand,
            "lot_number": self.implant_lot_number,
            "implant_date": self.implant_date,
            "position": self.implant_position,
            "diameter": self.implant_diameter,
            "length": self.implant_length,
            "notes": self.implant_notes,
        }

    @property
    def patient_age(self) -> int | None:
        return compute_age(self.date_of_birth)
