#!/usr/bin/env python3
"""
manage_store.py - Seed and inspect a CampusBook storage scope

Uses the storage backend configured through CAMPUSBOOK_* environment
variables (file backend under .campusbook/ by default).

Usage:
    python scripts/manage_store.py seed [--admin-password PASSWORD]
    python scripts/manage_store.py accounts
    python scripts/manage_store.py users [--role teacher] [--status pending]
"""

import argparse
import asyncio
import sys

import structlog

from campusbook.auth import create_auth_service
from campusbook.common.logging import configure_logging
from campusbook.common.settings import get_settings
from campusbook.docstore import create_document_store
from campusbook.records.seed import seed_admin_accounts, seed_sample_teachers
from campusbook.records.users import list_users

logger = structlog.get_logger()


async def seed(admin_password: str) -> None:
    settings = get_settings()
    store = create_document_store(settings)
    auth = create_auth_service(store.storage, settings)

    teachers_added = await seed_sample_teachers(store, marker_key=settings.seed_marker_key)
    admins_added = await seed_admin_accounts(store, auth, admin_password)

    print(f"Sample teachers: {'added' if teachers_added else 'already present'}")
    print(f"Admin credentials added: {len(admins_added)}")
    for email in admins_added:
        print(f"  - {email}")


def show_accounts() -> None:
    settings = get_settings()
    store = create_document_store(settings)
    auth = create_auth_service(store.storage, settings)

    credentials = auth.load_credentials()
    if not credentials:
        print("No accounts found. Run: python scripts/manage_store.py seed")
        return
    for index, credential in enumerate(credentials, start=1):
        print(f"{index}. {credential.email} | {credential.uid}")


async def show_users(role: str | None, status: str | None) -> None:
    store = create_document_store(get_settings())
    users = await list_users(store, role=role, status=status)
    if not users:
        print("No users found.")
        return
    for user in users:
        print(f"{user.name} | {user.email} | {user.role} | {user.status}")


def main():
    parser = argparse.ArgumentParser(description="Seed and inspect a CampusBook storage scope")
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Add sample teachers and admin accounts")
    seed_parser.add_argument("--admin-password", default=None,
                             help="Password for new admin credentials (default: CAMPUSBOOK_ADMIN_SEED_PASSWORD)")

    subparsers.add_parser("accounts", help="List login accounts (emails and uids)")

    users_parser = subparsers.add_parser("users", help="List user profiles")
    users_parser.add_argument("--role", choices=["admin", "teacher", "student"])
    users_parser.add_argument("--status", choices=["pending", "approved", "rejected"])

    args = parser.parse_args()
    configure_logging()

    try:
        if args.command == "seed":
            asyncio.run(seed(args.admin_password or get_settings().admin_seed_password))
        elif args.command == "accounts":
            show_accounts()
        elif args.command == "users":
            asyncio.run(show_users(args.role, args.status))
    except ValueError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
