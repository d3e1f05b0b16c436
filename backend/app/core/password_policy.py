from __future__ import annotations

import re
from typing import List

from app.core.config import settings
from app.core.errors import WeakCredential

_LETTER_RE = re.compile(r"[A-Za-z]")
_NUMBER_RE = re.compile(r"[0-9]")


def evaluate_password(password: str | None) -> List[str]:
    """
    Returns a list of violation codes if the password does not meet policy.
    """
    pw = password or ""
    violations: list[str] = []
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 8) or 0), 1)

    if len(pw) < min_length:
        violations.append("min_length")
    if not _LETTER_RE.search(pw):
        violations.append("letter")
    if not _NUMBER_RE.search(pw):
        violations.append("number")

    return violations


def ensure_strong_password(password: str | None) -> None:
    violations = evaluate_password(password)
    if violations:
        raise WeakCredential(violations)
