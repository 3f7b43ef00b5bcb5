from __future__ import annotations
"""Normalized role/permission catalog.

One structure holds the role list, the declared permission names and each
role's subset. The full permission set is derived (declared names plus anything
a concrete subset mentions) so it never has to be retyped per role.

JSON shape accepted by from_dict()/load_catalog():

    {
      "roles": ["admin", "tutor"],
      "permissions": ["can-manage-courses", "can-manage-bookings"],
      "assignments": {"admin": ["*"], "tutor": ["can-manage-bookings"]}
    }
"""
import difflib
import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from lernen_authz.constants.permissions import WILDCARD, ROLE_NAMES, PERMISSIONS, ROLE_PRESETS
from lernen_authz.errors import CatalogError

NAME_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for n in names:
        if n not in seen:
            seen.append(n)
    return tuple(seen)


@dataclass(frozen=True)
class PermissionCatalog:
    roles: Tuple[str, ...]
    permissions: Tuple[str, ...]
    assignments: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'roles', _unique(self.roles))
        object.__setattr__(self, 'permissions', _unique(self.permissions))
        object.__setattr__(self, 'assignments', {r: _unique(p) for r, p in self.assignments.items()})

    def all_permissions(self) -> Tuple[str, ...]:
        subset_names = [p for names in self.assignments.values() for p in names if p != WILDCARD]
        return _unique(list(self.permissions) + subset_names)

    def permissions_for(self, role: str) -> Set[str]:
        names = self.assignments.get(role, ())
        if WILDCARD in names:
            return set(self.all_permissions())
        return set(names)

    def assigned_roles(self) -> List[str]:
        """Roles with a declared subset, in role-list order then declaration order."""
        ordered = [r for r in self.roles if r in self.assignments]
        return ordered + [r for r in self.assignments if r not in ordered]

    def validate(self) -> List[str]:
        problems: List[str] = []
        for name in self.all_permissions():
            if not NAME_PATTERN.match(name):
                problems.append(f"Invalid permission name (expected kebab-case): {name}")
        for role in self.roles:
            if not role:
                problems.append('Empty role name')
        declared = set(self.permissions)
        for role, names in self.assignments.items():
            if role not in self.roles:
                problems.append(f"Assignment for undeclared role '{role}'")
            for name in names:
                if name == WILDCARD or name in declared:
                    continue
                suggestion = difflib.get_close_matches(name, declared, n=1)
                hint = f" (did you mean {suggestion[0]})" if suggestion else ''
                problems.append(f"Role '{role}' references undeclared permission: {name}{hint}")
        return problems

    def to_role_map(self) -> Dict[str, List[str]]:
        return {role: sorted(self.permissions_for(role)) for role in self.assigned_roles()}

    def checksum(self) -> str:
        canonical = json.dumps(self.to_role_map(), sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(canonical.encode('utf-8')).hexdigest()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PermissionCatalog':
        if not isinstance(data, Mapping):
            raise CatalogError('Catalog must be a JSON object')
        roles = data.get('roles') or []
        permissions = data.get('permissions') or []
        assignments = data.get('assignments') or {}
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise CatalogError("'roles' must be a list of strings")
        if not isinstance(permissions, list) or not all(isinstance(p, str) for p in permissions):
            raise CatalogError("'permissions' must be a list of strings")
        if not isinstance(assignments, dict):
            raise CatalogError("'assignments' must be an object of role -> list")
        for role, names in assignments.items():
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                raise CatalogError(f"Assignment for role '{role}' must be a list of strings", details={'role': role})
        return cls(roles=tuple(roles), permissions=tuple(permissions),
                   assignments={r: tuple(n) for r, n in assignments.items()})


def load_catalog(path: str) -> PermissionCatalog:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}", details={'path': path}) from e
    return PermissionCatalog.from_dict(data)


def default_catalog(path: Optional[str] = None) -> PermissionCatalog:
    if path:
        return load_catalog(path)
    return PermissionCatalog(
        roles=tuple(ROLE_NAMES),
        permissions=tuple(PERMISSIONS),
        assignments={role: tuple(names) for role, names in ROLE_PRESETS.items()},
    )

__all__ = ['PermissionCatalog', 'load_catalog', 'default_catalog', 'NAME_PATTERN']
