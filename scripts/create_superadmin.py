#!/usr/bin/env python3
"""
Create a platform superadmin account.

Usage:
  python scripts/create_superadmin.py <email> <password> [first_name] [last_name]
  # Requires DATABASE_URL and SECRET_KEY in .env (or export)

Superadmins have no school; they manage every tenant from /api/v1/superadmin.
"""
import asyncio
import os
import sys

from dotenv import load_dotenv

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(_root, ".env"))

# Add project root to path
sys.path.insert(0, _root)

from classpass.core.exceptions import ServiceError
from classpass.database import AsyncSessionLocal, close_db
from classpass.models.enums import UserRole
from classpass.services.user_service import UserService


async def run(email, password, first_name, last_name):
    try:
        async with AsyncSessionLocal() as db:
            user = await UserService.create_user(
                db,
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.SUPERADMIN,
            )
            await db.commit()
            return user.id
    finally:
        await close_db()


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    email, password = sys.argv[1], sys.argv[2]
    first_name = sys.argv[3] if len(sys.argv) > 3 else "Super"
    last_name = sys.argv[4] if len(sys.argv) > 4 else "Admin"

    print(f"Creating superadmin {email}...")
    try:
        user_id = asyncio.run(run(email, password, first_name, last_name))
    except ServiceError as e:
        print(f"FAILED: {e.code}: {e.message}")
        sys.exit(1)
    print(f"SUCCESS: superadmin created with id {user_id}")


if __name__ == "__main__":
    main()
