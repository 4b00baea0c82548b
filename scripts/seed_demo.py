#!/usr/bin/env python3
"""
Seed the demo school: owner, admin and teacher logins plus courses,
packages, students and purchases.

Usage:
  python scripts/seed_demo.py                      # demo@owner.com / demo@admin.com / demo@teacher.com
  python scripts/seed_demo.py <password>
  # Requires DATABASE_URL and SECRET_KEY in .env (or export)
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
from classpass.schemas.superadmin import DemoSeedRequest
from classpass.services.demo_service import DemoService


async def run(request: DemoSeedRequest):
    try:
        async with AsyncSessionLocal() as db:
            return await DemoService.seed_demo(db, request)
    finally:
        await close_db()


def main():
    request = DemoSeedRequest(password=sys.argv[1]) if len(sys.argv) > 1 else DemoSeedRequest()
    print("Seeding demo school...")
    try:
        result = asyncio.run(run(request))
    except ServiceError as e:
        print(f"FAILED: {e.code}: {e.message}")
        sys.exit(1)
    print(f"SUCCESS: demo school {result['school_id']}")
    for account in result["accounts"]:
        print(f"  {account['role']}: {account['email']} / {request.password}")


if __name__ == "__main__":
    main()
