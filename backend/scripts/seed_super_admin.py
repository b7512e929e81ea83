"""
Seed the first super admin account.

super_admin can never be self-registered, so the first one is created out
of band with this script. Idempotent: an existing account with the same
email is left untouched.

Usage:
    SUPER_ADMIN_PASSWORD=... python scripts/seed_super_admin.py --email admin@example.com
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from newsroom.core.database import async_session_maker, close_db, init_db
from newsroom.core.security import get_password_hash
from newsroom.models.user import ROLE_SUPER_ADMIN
from newsroom.repositories.user import UserRepository
from newsroom.services import account_rules


async def seed_super_admin(email: str, name: str, password: str) -> None:
    await init_db()
    async with async_session_maker() as session:
        try:
            users = UserRepository(session)
            email = account_rules.normalize_email(email)
            if await users.email_exists(email):
                print(f"Account {email} already exists. Skipping...")
                return

            await users.create(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                role=ROLE_SUPER_ADMIN,
                email_verified=True,
            )
            await session.commit()
            print(f"Super admin {email} created.")
        except Exception:
            await session.rollback()
            raise
    await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Super Admin")
    args = parser.parse_args()

    password = os.environ.get("SUPER_ADMIN_PASSWORD", "")
    if len(password) < account_rules.PASSWORD_MIN:
        parser.error(f"SUPER_ADMIN_PASSWORD must be at least {account_rules.PASSWORD_MIN} characters")

    asyncio.run(seed_super_admin(args.email, args.name, password))


if __name__ == "__main__":
    main()
