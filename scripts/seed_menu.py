"""
Seed Script

Creates the tables, inserts the default menu and optionally the first
admin account.
Run from project root: python scripts/seed_menu.py --admin-email staff@example.com --admin-password secret
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from qrmenu.core.config import get_settings, setup_logging
from qrmenu.database import async_session_maker, engine, init_db
from qrmenu.seed import seed_menu
from qrmenu.services.auth import create_admin_user


async def main(admin_email: str | None, admin_password: str | None, skip_menu: bool) -> int:
    settings = get_settings()
    print("=" * 60)
    print(f"🌱 Seeding {settings.restaurant_name}")
    print(f"   Database: {settings.database_url.split('@')[-1]}")
    print("=" * 60)

    await init_db()
    async with async_session_maker() as session:
        if not skip_menu:
            counts = await seed_menu(session)
            print(f"✅ {counts['categories']} categories, {counts['menu_items']} menu items added")

        if admin_email and admin_password:
            result = await create_admin_user(session, admin_email, admin_password)
            if result.success:
                print(f"✅ Admin {result.value.email} created")
            else:
                print(f"⚠️ {result.error_message}")

    await engine.dispose()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the menu database")
    parser.add_argument("--admin-email", help="Create an admin account with this email")
    parser.add_argument("--admin-password", help="Password of the new admin account")
    parser.add_argument("--skip-menu", action="store_true", help="Do not insert the default menu")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(main(args.admin_email, args.admin_password, args.skip_menu)))
