#!/usr/bin/env python3
"""
Database setup script for the strategy paywall.

Uses SQLAlchemy models as the SINGLE SOURCE OF TRUTH for schema.
All tables, indexes, and constraints are defined in paywall/db/models.py.

Usage:
    python scripts/db_setup.py setup              # Create all tables
    python scripts/db_setup.py teardown           # Drop all tables (with confirmation)
    python scripts/db_setup.py reset              # Teardown + setup (full reset)
    python scripts/db_setup.py status             # Show table row counts
    python scripts/db_setup.py promote <id>       # Give an account the admin role

Environment variables (from .env):
    - DATABASE_URL: Full asyncpg URL (overrides the parts below)
    - DATABASE_NAME / DATABASE_USER / DATABASE_PASSWORD
    - DATABASE_HOST / DATABASE_PORT
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from sqlalchemy import func, select  # noqa: E402

from paywall.constants import ADMIN_ROLE  # noqa: E402
from paywall.core.access import AccountUpdate  # noqa: E402
from paywall.db import DatabaseManager  # noqa: E402
from paywall.db.models import (  # noqa: E402
    AccountModel,
    Base,
    SavedStrategyModel,
    StrategyModel,
    UsagePeriodModel,
)
from paywall.db.repositories import SqlAccountRepository  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _confirm(prompt: str, force: bool) -> bool:
    if force:
        return True
    answer = input(f"{prompt} (yes/no): ")
    return answer.lower() == "yes"


# =============================================================================
# COMMANDS
# =============================================================================

async def cmd_setup(db: DatabaseManager):
    """Create all tables from the models."""
    if not await db.test_connection():
        logger.error("Cannot connect to database")
        return False

    await db.create_tables()
    logger.info("Setup complete")
    return True


async def cmd_teardown(db: DatabaseManager, force: bool = False):
    """Drop all tables."""
    if not _confirm("Are you sure you want to DROP all tables? This cannot be undone.", force):
        logger.info("Teardown cancelled")
        return False

    await db.drop_tables()
    logger.info("Teardown complete")
    return True


async def cmd_reset(db: DatabaseManager, force: bool = False):
    """Drop and recreate all tables."""
    if not _confirm("Are you sure you want to RESET the database? All data will be lost.", force):
        logger.info("Reset cancelled")
        return False

    await db.drop_tables()
    await db.create_tables()
    logger.info("Reset complete")
    return True


async def cmd_status(db: DatabaseManager):
    """Show row counts per table."""
    if not await db.test_connection():
        logger.error("Cannot connect to database")
        return False

    async with db.session() as session:
        for model in (AccountModel, UsagePeriodModel, StrategyModel, SavedStrategyModel):
            try:
                count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
                print(f"  {model.__tablename__:<16} {count:>8} rows")
            except Exception as e:
                print(f"  {model.__tablename__:<16} missing ({type(e).__name__})")
                await session.rollback()
    return True


async def cmd_promote(db: DatabaseManager, account_id: str):
    """Set role=admin on an existing account."""
    accounts = SqlAccountRepository(db)
    account = await accounts.update_account(account_id, AccountUpdate(role=ADMIN_ROLE))
    if account is None:
        logger.error(f"Account not found: {account_id}")
        return False

    logger.info(f"Account {account_id} is now an admin")
    return True


def cmd_models():
    """Print the model definitions."""
    for table_name, table in sorted(Base.metadata.tables.items()):
        print(f"Table: {table_name}")
        print("-" * 40)

        for column in table.columns:
            nullable = "NULL" if column.nullable else "NOT NULL"
            pk = " PRIMARY KEY" if column.primary_key else ""
            fk = ""
            if column.foreign_keys:
                fk = f" -> {', '.join(str(k.target_fullname) for k in column.foreign_keys)}"
            print(f"  {column.name}: {column.type} {nullable}{pk}{fk}")

        for index in table.indexes:
            cols = ", ".join(c.name for c in index.columns)
            print(f"  INDEX {index.name} ({cols})")

        print()


async def run(args) -> bool:
    db = DatabaseManager()
    if not db.enabled:
        logger.error("DATABASE_ENABLED is false; nothing to do")
        return False

    try:
        if args.command == "setup":
            return await cmd_setup(db)
        if args.command == "teardown":
            return await cmd_teardown(db, force=args.force)
        if args.command == "reset":
            return await cmd_reset(db, force=args.force)
        if args.command == "status":
            return await cmd_status(db)
        if args.command == "promote":
            if not args.account_id:
                logger.error("promote requires an account id")
                return False
            return await cmd_promote(db, args.account_id)
        return False
    finally:
        await db.close()


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description="Database setup script for the strategy paywall",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/db_setup.py setup              # Create all tables
  python scripts/db_setup.py status             # Show database state
  python scripts/db_setup.py reset --force      # Reset database
  python scripts/db_setup.py promote abc123     # Make account abc123 an admin
  python scripts/db_setup.py models             # Show model definitions

Schema is defined in: paywall/db/models.py (SINGLE SOURCE OF TRUTH)
        """
    )

    parser.add_argument(
        "command",
        choices=["setup", "teardown", "reset", "status", "promote", "models"],
        help="Command to execute"
    )
    parser.add_argument("account_id", nargs="?", help="Account id (promote only)")
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Skip confirmation prompts for destructive operations"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == "models":
        cmd_models()
        return

    ok = asyncio.run(run(args))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
