"""
Bootstrap the first administrator account.

    python -m app.scripts.create_admin --email admin@example.com --password '...' \
        --name "Super Admin" --mobile 9812345678
"""

import argparse
import asyncio
import sys

from app.core.exceptions import AppError
from app.core.logger import logger
from app.core.security import get_password_hash
from app.core.utils import normalize_mobile
from app.db.repository import AccountRepository
from app.db.session import async_session, engine, init_db


async def ensure_admin(email: str, password: str, name: str, mobile: str) -> bool:
    """Create the admin unless that email is already registered. Returns True if created."""
    await init_db()
    async with async_session() as session:
        repository = AccountRepository(session)
        if await repository.find_by_email(email):
            logger.info(f"Admin {email} already exists")
            return False

        admin = await repository.create_admin(
            phone=normalize_mobile(mobile),
            email=email,
            name=name,
            password_hash=get_password_hash(password),
        )
        logger.info(f"Admin created: {admin.email} ({admin.id})")
        return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an administrator account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Super Admin")
    parser.add_argument("--mobile", required=True)
    args = parser.parse_args(argv)

    async def run():
        try:
            return await ensure_admin(args.email, args.password, args.name, args.mobile)
        finally:
            await engine.dispose()

    try:
        asyncio.run(run())
    except AppError as exc:
        logger.error(f"Could not create admin: {exc.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
