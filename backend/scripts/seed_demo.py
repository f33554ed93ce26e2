#!/usr/bin/env python
"""Idempotent seed script for demo users, inventory and orders.

Usage:
    python backend/scripts/seed_demo.py               # seed normally
    python backend/scripts/seed_demo.py --show-roles  # print user -> permission counts (after seeding)
    python backend/scripts/seed_demo.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_demo.py --validate    # exit 2 if any stored permission key is unregistered
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from tailor_ops import create_app, get_db, load_models  # type: ignore
from tailor_ops.constants.permissions import is_known_permission
from tailor_ops.models.authz import User
from tailor_ops.seeding import seed_demo, role_summary, DEFAULT_PASSWORD


def print_role_summary(session):
    rows = role_summary(session)
    if not rows:
        print("[INFO] No users present.")
        return
    role_w = max(len(r[0]) for r in rows)
    email_w = max(len(r[1]) for r in rows)
    print(f"{'Role'.ljust(role_w)} | {'Email'.ljust(email_w)} | Count")
    print('-' * (role_w + email_w + 12))
    for role, email, cnt in rows:
        print(f"{role.ljust(role_w)} | {email.ljust(email_w)} | {str(cnt).rjust(5)}")


def find_problems(session):
    problems = []
    for user in session.execute(select(User)).scalars().all():
        for key in user.permissions or []:
            if not is_known_permission(key):
                problems.append(f"User '{user.email}' holds unknown permission key: {key}")
    return problems


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed demo users, inventory and orders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_demo.py\n  dry run: seed_demo.py --dry-run\n  show roles: seed_demo.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print user permission counts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--validate', action='store_true', help='Validate stored permission keys; exits non-zero on problems')
    p.add_argument('--password', default=os.getenv('SEED_PASSWORD', DEFAULT_PASSWORD), help='Password for created demo users')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        # Auto-create schema for bootstrap; in real env prefer alembic upgrade
        load_models().metadata.create_all(session.get_bind())
        try:
            counts = seed_demo(session, password=args.password)
            if args.validate:
                problems = find_problems(session)
                if problems:
                    print('\n[VALIDATION] FAIL:')
                    for problem in problems:
                        print(' -', problem)
                    session.rollback()
                    sys.exit(2)
                print('[VALIDATION] OK: All stored permission keys are registered.')
            if args.show_roles:
                print_role_summary(session)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Users would create: {counts['users']}, Orders would create: {counts['orders']}")
            else:
                session.commit()
                print(f"[DONE] Users created: {counts['users']}, Orders created: {counts['orders']}")
        except Exception:
            session.rollback()
            raise


if __name__ == '__main__':
    main()
