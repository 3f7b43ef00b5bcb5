#!/usr/bin/env python
"""Idempotent repair script: reconcile Lernen roles & permissions, then verify the admin account.

Usage:
    python backend/scripts/seed_roles.py                        # reconcile with the built-in catalog
    python backend/scripts/seed_roles.py --show-roles           # print role -> permission counts afterwards
    python backend/scripts/seed_roles.py --dry-run              # run logic then rollback (no DB changes)
    python backend/scripts/seed_roles.py --validate             # check catalog only; exit 2 on problems
    python backend/scripts/seed_roles.py --catalog roles.json --strict
    python backend/scripts/seed_roles.py --export-json out.json

Exit codes:
  0 success
  1 unexpected error (message and stack trace printed)
  2 catalog validation failed
"""
from __future__ import annotations
import argparse, json, pathlib, sys, textwrap, traceback

# Allow running from repo root
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from lernen_authz import create_app, get_db  # noqa: E402
from lernen_authz.models.authz import Base  # noqa: E402
from lernen_authz.services.catalog import default_catalog  # noqa: E402
from lernen_authz.services.policy import (  # noqa: E402
    build_role_permission_map, compute_effective_permissions, find_user_by_email, role_permission_names,
)
from lernen_authz.services.role_definitions import RoleDefinitionStore, ResolutionMode  # noqa: E402
from lernen_authz.utils.db import foreign_key_checks_disabled  # noqa: E402


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Reconcile Lernen roles & permissions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  reconcile: seed_roles.py\n  dry run: seed_roles.py --dry-run\n  show roles: seed_roles.py --show-roles\n""")
    )
    p.add_argument('--catalog', metavar='FILE', help='JSON catalog to use instead of the built-in one')
    p.add_argument('--strict', action='store_true', help='Fail on unknown role/permission references instead of skipping them')
    p.add_argument('--show-roles', action='store_true', help='Print role permission counts after reconciling')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--validate', action='store_true', help='Validate the catalog and exit; non-zero on problems')
    p.add_argument('--admin-email', metavar='EMAIL', help='Admin account to verify (default: SEED_ADMIN_EMAIL)')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export role->permissions JSON (to FILE or stdout if omitted)')
    return p.parse_args(argv)


def print_role_summary(role_map):
    if not role_map:
        print("[INFO] No roles present.")
        return
    name_w = max(len(name) for name in role_map)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, perms in role_map.items():
        print(f"{name.ljust(name_w)} | {str(len(perms)).rjust(5)} | {', '.join(perms[:8])}")


def verify_admin(session, email):
    print("\n[INFO] Verifying permissions assignment...")
    admin_perms = role_permission_names('admin', session)
    if admin_perms is None:
        print("[WARN] Admin role not found")
    else:
        print(f"[INFO] Admin role has {len(admin_perms)} permissions assigned")
        for name in admin_perms:
            print(f"   - {name}")

    print(f"\n[INFO] Verifying admin user assignment ({email})...")
    user = find_user_by_email(email, session)
    if not user:
        print(f"[WARN] Admin user not found: {email}")
        return
    eff = compute_effective_permissions(user.id, session)
    print(f"[INFO] Admin user ({email}) has roles: {', '.join(eff['roles'])}")
    print(f"[INFO] Admin user has {len(eff['perms'])} permissions")
    print("\n[INFO] Admin user permissions:")
    for name in eff['perms']:
        print(f"   - {name}")


def export_json(role_map, catalog, target, dry_run):
    payload = {
        'roles': role_map,
        'meta': {
            'permissions_total': sum(len(v) for v in role_map.values()),
            'distinct_permissions': len({p for plist in role_map.values() for p in plist}),
            'catalog_checksum_sha256': catalog.checksum(),
            'role_names_sorted': sorted(role_map.keys()),
            'dry_run': dry_run,
        }
    }
    if target == '-':
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        with open(target, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, sort_keys=True)
        print(f"[INFO] Exported JSON to {target}")


def run(args, app):
    catalog = default_catalog(args.catalog or app.config.get('AUTHZ_CATALOG_FILE'))
    if args.validate:
        problems = catalog.validate()
        if problems:
            print('\n[VALIDATION] FAIL:')
            for p in problems:
                print(' -', p)
            return 2
        print('[VALIDATION] OK: Catalog role & permission references valid.')
        return 0

    mode = ResolutionMode.STRICT if args.strict else ResolutionMode.from_config(app.config)
    with app.app_context():
        session = get_db()
        try:
            # Lightweight bootstrap when migrations have not been run
            Base.metadata.create_all(session.get_bind(), checkfirst=True)
            print("[INFO] Reconciling roles & permissions...")
            store = RoleDefinitionStore(session, mode)
            with foreign_key_checks_disabled(session):
                report = store.reconcile(catalog, commit=not args.dry_run)
            for role in report.skipped_roles:
                print(f"[WARN] Role {role} missing; permissions not assigned")
            role_map = build_role_permission_map(session)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Permissions would create: {len(report.permissions_created)}, Roles would create: {len(report.roles_created)}")
            else:
                print(f"[DONE] Permissions created: {len(report.permissions_created)}, Roles created: {len(report.roles_created)}")
            if args.show_roles:
                print('\nRole Permission Summary:')
                print_role_summary(role_map)
            if not args.dry_run:
                verify_admin(session, args.admin_email or app.config['SEED_ADMIN_EMAIL'])
            if args.export_json is not None:
                export_json(role_map, catalog, args.export_json, args.dry_run)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
    return 0


def main(argv=None, app=None) -> int:
    args = parse_args(argv)
    try:
        if app is None:
            app = create_app()
        return run(args, app)
    except Exception as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        print("Stack trace:", file=sys.stderr)
        traceback.print_exc()
        return 1


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main(sys.argv[1:]))
