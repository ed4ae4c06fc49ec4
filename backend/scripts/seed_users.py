#!/usr/bin/env python
"""Idempotent seed script for the initial admin account.

Usage:
    python backend/scripts/seed_users.py                                  # seed normally
    python backend/scripts/seed_users.py --email ops@example.com --password s3cret!
    python backend/scripts/seed_users.py --dry-run                        # report only, no writes
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from powerdesk import create_app, get_db, get_store  # type: ignore
from powerdesk.models.authz import Account
from powerdesk.services.identity import IdentityProvider
from powerdesk.services.notifications import now_ms


def ensure_schema(session):
    try:
        session.execute(text('SELECT 1 FROM accounts LIMIT 1'))
    except Exception:
        # Auto-create schema for bootstrap; in real env prefer alembic upgrade
        session.rollback()
        from powerdesk.models.authz import Base  # local import to avoid circular
        import powerdesk.models.document  # noqa: F401
        Base.metadata.create_all(session.get_bind())
    finally:
        session.commit()


def ensure_admin(email: str, password: str, name: str, dry_run: bool = False):
    """Return (uid, created) for the admin account and its ``users/{uid}`` profile."""
    email = email.strip().lower()
    session = get_db()
    account = session.execute(select(Account).where(Account.email == email)).scalar_one_or_none()
    if account is None:
        if dry_run:
            return None, True
        user = IdentityProvider(get_db).create_account(email, password)
        uid, created = user.uid, True
    else:
        uid, created = account.uid, False
    store = get_store()
    if not dry_run and not store.exists(f'users/{uid}'):
        store.set(f'users/{uid}', {
            'id': uid,
            'email': email,
            'name': name,
            'role': 'admin',
            'status': 'active',
            'createdAt': now_ms(),
        })
    return uid, created


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed the initial admin user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_users.py\n  dry run: seed_users.py --dry-run\n""")
    )
    p.add_argument('--email', default=os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com'))
    p.add_argument('--password', default=os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    p.add_argument('--name', default='Administrator')
    p.add_argument('--dry-run', action='store_true', help='Report what would be created without writing')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        ensure_schema(session)
        try:
            uid, created = ensure_admin(args.email, args.password, args.name, dry_run=args.dry_run)
        finally:
            session.close()
    if args.dry_run:
        print(f"[DRY-RUN] Admin {args.email} would be {'created' if created else 'kept'}")
    elif created:
        print(f"[INFO] Created initial admin user {args.email} ({uid}) with temporary password.")
    else:
        print(f"[DONE] Admin user {args.email} already present ({uid})")


if __name__ == '__main__':
    main()
