"""Test seeding utilities to reduce duplication.

These write rows directly, bypassing RoleDefinitionStore, so tests can set up a
"previous state" for reconciliation to correct.
"""
from typing import Iterable, Dict, List
from lernen_authz import get_db
from lernen_authz.models.authz import User, Role, Permission, RolePermission, UserRole
from sqlalchemy import select


def ensure_permissions(names: Iterable[str]) -> Dict[str, Permission]:
    """Ensure each permission name exists; return dict name->Permission."""
    session = get_db()
    out: Dict[str, Permission] = {}
    for name in names:
        obj = session.query(Permission).filter_by(name=name).one_or_none()
        if not obj:
            obj = Permission(name=name)
            session.add(obj); session.flush()
        out[name] = obj
    session.commit()
    return out


def ensure_role(name: str, perm_names: Iterable[str] = ()) -> Role:
    session = get_db()
    role = session.query(Role).filter_by(name=name).one_or_none()
    perms = ensure_permissions(perm_names) if perm_names else {}
    if not role:
        role = Role(name=name, is_system=False)
        session.add(role); session.flush()
    # attach any missing permissions
    existing_perm_ids = {rp.permission_id for rp in session.query(RolePermission).filter_by(role_id=role.id)}
    for p in perms.values():
        if p.id not in existing_perm_ids:
            session.add(RolePermission(role_id=role.id, permission_id=p.id))
    session.commit()
    return role


def ensure_user(email: str, name: str = None) -> User:
    session = get_db()
    u = session.query(User).filter_by(email=email).one_or_none()
    if not u:
        u = User(name=name or email.split('@')[0], email=email)
        session.add(u); session.commit(); session.refresh(u)
    return u


def ensure_user_role_assignment(user: User, role: Role):
    session = get_db()
    if not session.query(UserRole).filter_by(user_id=user.id, role_id=role.id).one_or_none():
        session.add(UserRole(user_id=user.id, role_id=role.id)); session.commit()


def role_permissions(role_name: str) -> List[str]:
    session = get_db()
    rows = session.execute(
        select(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(Role, Role.id == RolePermission.role_id)
        .where(Role.name == role_name)
    ).scalars()
    return sorted(rows)


def snapshot() -> Dict[str, object]:
    """Full role/permission/edge state keyed by names, for before/after comparisons."""
    session = get_db()
    roles = sorted(session.execute(select(Role.name)).scalars())
    return {
        'roles': roles,
        'permissions': sorted(session.execute(select(Permission.name)).scalars()),
        'edges': {r: role_permissions(r) for r in roles},
        'edge_rows': session.query(RolePermission).count(),
    }


__all__ = [
    'ensure_permissions', 'ensure_role', 'ensure_user', 'ensure_user_role_assignment',
    'role_permissions', 'snapshot',
]
