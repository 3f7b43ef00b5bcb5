from __future__ import annotations
from typing import Dict, List, Optional
from sqlalchemy import select
from lernen_authz.models.authz import User, UserRole, RolePermission, Permission, Role
from lernen_authz import get_db


def list_role_names(session=None) -> List[str]:
    session = session or get_db()
    return list(session.execute(select(Role.name).order_by(Role.id.asc())).scalars())


def list_permission_names(session=None) -> List[str]:
    session = session or get_db()
    return list(session.execute(select(Permission.name).order_by(Permission.id.asc())).scalars())


def role_permission_names(role_name: str, session=None) -> Optional[List[str]]:
    """Sorted permission names assigned to a role, or None if the role does not exist."""
    session = session or get_db()
    role = session.execute(select(Role).where(Role.name==role_name)).scalar_one_or_none()
    if not role:
        return None
    rows = session.execute(
        select(Permission.name)
        .join(RolePermission, RolePermission.permission_id==Permission.id)
        .where(RolePermission.role_id==role.id)
    ).scalars()
    return sorted(rows)


def build_role_permission_map(session=None) -> Dict[str, List[str]]:
    session = session or get_db()
    mapping = {}
    for role in session.execute(select(Role).order_by(Role.id.asc())).scalars().all():
        mapping[role.name] = role_permission_names(role.name, session)
    return mapping


def find_user_by_email(email: str, session=None) -> Optional[User]:
    session = session or get_db()
    return session.execute(select(User).where(User.email==email)).scalar_one_or_none()


def compute_effective_permissions(user_id: int, session=None):
    """Role names and the union of their permissions for one user."""
    session = session or get_db()
    role_ids = [ur.role_id for ur in session.execute(select(UserRole).where(UserRole.user_id==user_id)).scalars()]
    role_names = []
    perm_names = set()
    if role_ids:
        role_names = sorted(session.execute(select(Role.name).where(Role.id.in_(role_ids))).scalars())
        perm_names.update(session.execute(
            select(Permission.name)
            .join(RolePermission, RolePermission.permission_id==Permission.id)
            .where(RolePermission.role_id.in_(role_ids))
        ).scalars())
    return {
        'roles': role_names,
        'perms': sorted(perm_names),
    }
