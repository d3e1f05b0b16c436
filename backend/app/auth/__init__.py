# app/auth/__init__.py
"""
Authentication and authorization building blocks.

This package contains:
- identity.py: Canonical authenticated identity model
- policy.py: Role + ownership authorization for passport operations
"""
from app.auth.identity import Identity
from app.auth.policy import ListScope, Operation, authorize, list_scope, permit

__all__ = ["Identity", "ListScope", "Operation", "authorize", "list_scope", "permit"]
