"""Account repository - user records in PostgreSQL."""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from paywall.core.access.exceptions import StorageUnavailableError
from paywall.core.access.schemas import Account, AccountUpdate

from ..connection import DatabaseManager
from ..models import AccountModel, SavedStrategyModel, UsagePeriodModel
from ..utils import with_db_retry
from .base import AccountRepository

logger = logging.getLogger(__name__)


class SqlAccountRepository(AccountRepository):
    """Accounts stored in the ``accounts`` table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    async def get_account(self, account_id: str) -> Optional[Account]:
        try:
            return await self._get_account(account_id)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                f"Account read failed: {e}", account_id=account_id
            ) from e

    @with_db_retry
    async def _get_account(self, account_id: str) -> Optional[Account]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            row = await session.get(AccountModel, account_id)
            return Account.model_validate(row) if row else None

    @with_db_retry
    async def list_accounts(self, limit: int = 50, offset: int = 0) -> List[Account]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            stmt = (
                select(AccountModel)
                .order_by(AccountModel.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(stmt)
            return [Account.model_validate(row) for row in result.scalars().all()]

    @with_db_retry
    async def find_by_email(self, email: str) -> List[Account]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            result = await session.execute(
                select(AccountModel).where(AccountModel.email == email)
            )
            return [Account.model_validate(row) for row in result.scalars().all()]

    @with_db_retry
    async def find_by_customer_id(self, customer_id: str) -> List[Account]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            result = await session.execute(
                select(AccountModel).where(AccountModel.stripe_customer_id == customer_id)
            )
            return [Account.model_validate(row) for row in result.scalars().all()]

    @with_db_retry
    async def create_account(self, account: Account) -> Account:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account.id)

            values = account.model_dump(exclude_none=True)
            await session.execute(
                insert(AccountModel).values(**values).on_conflict_do_nothing(index_elements=["id"])
            )
            row = await session.get(AccountModel, account.id)

            logger.info(f"Created account {account.id}")
            return Account.model_validate(row)

    @with_db_retry
    async def update_account(self, account_id: str, update: AccountUpdate) -> Optional[Account]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            row = await session.get(AccountModel, account_id)
            if row is None:
                return None

            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            await session.flush()

            logger.info(f"Updated account {account_id}: {sorted(update.model_fields_set)}")
            return Account.model_validate(row)

    @with_db_retry
    async def delete_account(self, account_id: str) -> bool:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            await session.execute(
                delete(UsagePeriodModel).where(UsagePeriodModel.account_id == account_id)
            )
            await session.execute(
                delete(SavedStrategyModel).where(SavedStrategyModel.account_id == account_id)
            )
            result = await session.execute(
                delete(AccountModel).where(AccountModel.id == account_id)
            )

            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted account {account_id} with its usage periods and saved strategies")
            return deleted
