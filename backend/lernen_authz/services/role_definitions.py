from __future__ import annotations
"""Bring stored roles, permissions and role->permission edges in line with a catalog.

Usage:
    from lernen_authz import get_db
    from lernen_authz.services.catalog import default_catalog
    from lernen_authz.services.role_definitions import RoleDefinitionStore

    store = RoleDefinitionStore(get_db())
    report = store.reconcile(default_catalog())

Every operation is create-if-absent or replace-set, so a second run with the
same catalog changes nothing. The store never remembers previous runs; the
database is the only state.
"""
import enum
import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import OperationalError, InterfaceError

from lernen_authz.errors import StorageUnavailable, UnknownRoleReference, UnknownPermissionReference
from lernen_authz.models.authz import Permission, Role, RolePermission
from lernen_authz.services.catalog import PermissionCatalog

logger = logging.getLogger(__name__)


class ResolutionMode(str, enum.Enum):
    LENIENT = 'lenient'
    STRICT = 'strict'

    @classmethod
    def from_config(cls, app_config) -> 'ResolutionMode':
        raw = (app_config.get('AUTHZ_RESOLUTION_MODE') or cls.LENIENT.value).strip().lower()
        return cls(raw)


@dataclass
class AssignmentResult:
    role: str
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)  # names with no stored Permission

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)

    @property
    def permissions(self) -> List[str]:
        return sorted(self.added + self.unchanged)


@dataclass
class ReconcileReport:
    roles_created: List[str] = field(default_factory=list)
    permissions_created: List[str] = field(default_factory=list)
    assignments: Dict[str, Optional[AssignmentResult]] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        if self.roles_created or self.permissions_created:
            return True
        return any(r is not None and r.changed for r in self.assignments.values())

    @property
    def skipped_roles(self) -> List[str]:
        return [name for name, r in self.assignments.items() if r is None]


def _storage_guard(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            raise StorageUnavailable(f"Storage unavailable during {fn.__name__}: {e.orig or e}") from e
    return wrapper


class RoleDefinitionStore:
    def __init__(self, session, mode: ResolutionMode = ResolutionMode.LENIENT):
        self.session = session
        self.mode = ResolutionMode(mode)

    @property
    def strict(self) -> bool:
        return self.mode is ResolutionMode.STRICT

    @_storage_guard
    def ensure_roles_exist(self, names: Iterable[str]) -> List[str]:
        """Create a Role row for each name that has none. Returns the names created."""
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        existing = set(self.session.execute(select(Role.name).where(Role.name.in_(wanted))).scalars())
        created = [n for n in wanted if n not in existing]
        for name in created:
            self.session.add(Role(name=name, is_system=True))
        self.session.flush()
        if created:
            logger.info('Created roles: %s', ', '.join(created))
        return created

    @_storage_guard
    def ensure_permissions_exist(self, names: Iterable[str]) -> List[str]:
        """Create a Permission row per distinct name; duplicates collapse to one row."""
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        existing = set(self.session.execute(select(Permission.name).where(Permission.name.in_(wanted))).scalars())
        created = [n for n in wanted if n not in existing]
        for name in created:
            self.session.add(Permission(name=name))
        self.session.flush()
        if created:
            logger.info('Created %d permissions', len(created))
        return created

    @_storage_guard
    def assign_permission_set(self, role: str, permissions: Iterable[str]) -> Optional[AssignmentResult]:
        """Replace the role's permission edges with exactly the resolvable subset of `permissions`.

        Lenient mode skips an absent role (returns None) and drops unknown
        permission names. Strict mode raises before anything is written.
        """
        role_obj = self.session.execute(
            select(Role).where(Role.name == role).with_for_update()
        ).scalar_one_or_none()
        if role_obj is None:
            if self.strict:
                raise UnknownRoleReference(role)
            logger.warning('Role %s not found; skipping permission assignment', role)
            return None

        wanted = set(permissions)
        resolved: Dict[str, int] = {}
        if wanted:
            rows = self.session.execute(select(Permission.name, Permission.id).where(Permission.name.in_(list(wanted))))
            resolved = {name: pid for name, pid in rows}
        missing = wanted - set(resolved)
        if missing:
            if self.strict:
                raise UnknownPermissionReference(role, missing)
            logger.warning('Role %s: dropping unknown permissions %s', role, sorted(missing))

        current = {
            pid: name for pid, name in self.session.execute(
                select(RolePermission.permission_id, Permission.name)
                .join(Permission, Permission.id == RolePermission.permission_id)
                .where(RolePermission.role_id == role_obj.id)
            )
        }
        desired_ids = set(resolved.values())
        to_remove = set(current) - desired_ids
        to_add = desired_ids - set(current)

        if to_remove:
            self.session.execute(
                delete(RolePermission).where(
                    RolePermission.role_id == role_obj.id,
                    RolePermission.permission_id.in_(list(to_remove)),
                )
            )
        for pid in sorted(to_add):
            self.session.add(RolePermission(role_id=role_obj.id, permission_id=pid))
        self.session.flush()
        self.session.expire(role_obj, ['permissions'])

        names_by_id = {pid: name for name, pid in resolved.items()}
        result = AssignmentResult(
            role=role,
            added=sorted(names_by_id[pid] for pid in to_add),
            removed=sorted(current[pid] for pid in to_remove),
            unchanged=sorted(current[pid] for pid in desired_ids & set(current)),
            dropped=sorted(missing),
        )
        if result.changed:
            logger.info('Role %s: +%d -%d permissions', role, len(result.added), len(result.removed))
        return result

    def reconcile(self, catalog: PermissionCatalog, commit: bool = True) -> ReconcileReport:
        """Create missing roles and permissions, then sync every declared role subset.

        With commit=True each phase is committed on its own: roles and
        permissions first, then one transaction per role. An interrupted run is
        finished by running it again.
        """
        report = ReconcileReport()
        report.roles_created = self.ensure_roles_exist(catalog.roles)
        report.permissions_created = self.ensure_permissions_exist(catalog.all_permissions())
        if commit:
            self._commit()
        for role in catalog.assigned_roles():
            report.assignments[role] = self.assign_permission_set(role, catalog.permissions_for(role))
            if commit:
                self._commit()
        return report

    @_storage_guard
    def _commit(self):
        self.session.commit()


__all__ = ['RoleDefinitionStore', 'ResolutionMode', 'AssignmentResult', 'ReconcileReport']
