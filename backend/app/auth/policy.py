# app/auth/policy.py
"""
Authorization policy for passport operations.

`permit` is a pure decision over (identity, operation, owner). Rules are keyed on
the Role enum; anything not explicitly allowed is denied. Ownership (the
passport's dentist_id) is the only axis for non-Admin access.

ListPassports is not a plain yes/no: `list_scope` also yields the filter the
resource manager must apply (none for Admin, own passports for a Dentist).
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app.auth.identity import Identity
from app.core.errors import Forbidden
from app.models.enums import Role

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    CREATE_PASSPORT = "CreatePassport"
    READ_PASSPORT = "ReadPassport"
    LIST_PASSPORTS = "ListPassports"
    UPDATE_PASSPORT = "UpdatePassport"
    DELETE_PASSPORT = "DeletePassport"
    EXPORT_PASSPORT = "ExportPassport"


# A rule receives (identity, owner_id) and answers allow/deny.
Rule = Callable[[Identity, Optional[int]], bool]


def _always(identity: Identity, owner_id: Optional[int]) -> bool:
    return True


def _owner_only(identity: Identity, owner_id: Optional[int]) -> bool:
    return owner_id is not None and owner_id == identity.id


_RULES: dict[Operation, dict[Role, Rule]] = {
    Operation.CREATE_PASSPORT: {
        Role.DENTIST: _always,
    },
    Operation.READ_PASSPORT: {
        Role.ADMIN: _always,
        Role.DENTIST: _owner_only,
    },
    Operation.LIST_PASSPORTS: {
        Role.ADMIN: _always,
        Role.DENTIST: _always,
    },
    Operation.UPDATE_PASSPORT: {
        Role.ADMIN: _always,
        Role.DENTIST: _owner_only,
    },
    Operation.DELETE_PASSPORT: {
        Role.ADMIN: _always,
    },
    Operation.EXPORT_PASSPORT: {
        Role.ADMIN: _always,
        Role.DENTIST: _owner_only,
    },
}


def permit(identity: Identity, operation: Operation, owner_id: Optional[int] = None) -> bool:
    rule = _RULES.get(operation, {}).get(identity.role)
    allowed = bool(rule and rule(identity, owner_id))
    logger.debug(
        "policy decision: op=%s user=%s role=%s owner=%s allowed=%s",
        operation.value,
        identity.id,
        identity.role.value,
        owner_id,
        allowed,
    )
    return allowed


def authorize(identity: Identity, operation: Operation, owner_id: Optional[int] = None) -> None:
    """Raise Forbidden unless `permit` allows the operation."""
    if not permit(identity, operation, owner_id):
        logger.info(
            "Access denied: op=%s user=%s role=%s owner=%s",
            operation.value,
            identity.id,
            identity.role.value,
            owner_id,
        )
        raise Forbidden()


@dataclass(frozen=True)
class ListScope:
    """Filter the resource manager must apply when listing. None means unfiltered."""

    dentist_id: Optional[int] = None

    def as_filter(self) -> dict[str, int]:
        return {} if self.dentist_id is None else {"dentist_id": self.dentist_id}


def list_scope(identity: Identity) -> Optional[ListScope]:
    """
    Decision for ListPassports. Returns None when listing is denied.
    """
    if not permit(identity, Operation.LIST_PASSPORTS):
        return None
    if identity.role is Role.ADMIN:
        return ListScope()
    return ListScope(dentist_id=identity.id)
