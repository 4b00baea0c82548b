#!/usr/bin/env python3
"""
Move single-course packages and their sold credits to multi-course targeting.

Usage:
  python scripts/migrate_packages.py              # every school
  python scripts/migrate_packages.py <school_id>  # one school
  # Requires DATABASE_URL and SECRET_KEY in .env (or export)

Safe to run more than once: packages that already carry an applicable
course list, or are universal, are skipped.
"""
import asyncio
import os
import sys
from uuid import UUID

from dotenv import load_dotenv

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(_root, ".env"))

# Add project root to path
sys.path.insert(0, _root)

from classpass.database import AsyncSessionLocal, close_db
from classpass.services.package_service import PackageService


async def run(school_id):
    async with AsyncSessionLocal() as db:
        result = await PackageService.migrate_legacy_targeting(db, school_id)
    await close_db()
    return result


def main():
    school_id = None
    if len(sys.argv) > 1:
        try:
            school_id = UUID(sys.argv[1])
        except ValueError:
            print(f"ERROR: not a school id: {sys.argv[1]}")
            sys.exit(1)

    scope = f"school {school_id}" if school_id else "all schools"
    print(f"Migrating package targeting for {scope}...")
    result = asyncio.run(run(school_id))
    print(
        f"DONE: {result['packages_migrated']} packages migrated, "
        f"{result['packages_skipped']} skipped, "
        f"{result['credits_migrated']} credits updated."
    )


if __name__ == "__main__":
    main()
