"""Exceptions raised while reconciling roles and permissions.

Lenient resolution never raises the reference errors; they only surface when a
store runs in strict mode.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, Optional


class ReconcileError(Exception):
    """Base class for role/permission reconciliation failures.

    Attributes:
        message: Human-readable error message
        details: Extra context (role name, missing permission names, ...)
    """

    message: str = 'Role/permission reconciliation failed'

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class StorageUnavailable(ReconcileError):
    """The database could not be reached. Never retried here."""

    message = 'Role/permission storage is unavailable'


class UnknownRoleReference(ReconcileError):
    message = 'Unknown role'

    def __init__(self, role: str):
        super().__init__(f"Unknown role: {role}", details={'role': role})
        self.role = role


class UnknownPermissionReference(ReconcileError):
    message = 'Unknown permission'

    def __init__(self, role: str, names: Iterable[str]):
        missing = sorted(set(names))
        super().__init__(
            f"Role '{role}' references unknown permissions: {missing}",
            details={'role': role, 'permissions': missing},
        )
        self.role = role
        self.names = missing


class CatalogError(ReconcileError):
    """Catalog data could not be parsed into a PermissionCatalog."""

    message = 'Invalid permission catalog'


__all__ = [
    'ReconcileError', 'StorageUnavailable', 'UnknownRoleReference',
    'UnknownPermissionReference', 'CatalogError',
]
