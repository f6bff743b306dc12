"""Usage repository - monthly strategy view records in PostgreSQL.

Each (account_id, period_key) row is updated under a row lock
(``SELECT ... FOR UPDATE``), so concurrent views for one account serialize
inside PostgreSQL while different accounts proceed in parallel.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from paywall.core.access.exceptions import StorageUnavailableError
from paywall.core.access.schemas import UsagePeriod

from ..connection import DatabaseManager
from ..models import UsagePeriodModel
from ..utils import with_db_retry
from .base import T, UsageRepository, UsageUpdate

logger = logging.getLogger(__name__)


class SqlUsageRepository(UsageRepository):
    """Usage periods stored in the ``usage_periods`` table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    async def run_usage_transaction(
        self,
        account_id: str,
        period_key: str,
        update: UsageUpdate[T],
        now: datetime,
    ) -> T:
        try:
            return await self._run_transaction(account_id, period_key, update, now)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                f"Usage transaction failed for period {period_key}: {e}",
                account_id=account_id,
            ) from e

    @with_db_retry
    async def _run_transaction(
        self,
        account_id: str,
        period_key: str,
        update_fn: UsageUpdate[T],
        now: datetime,
    ) -> T:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            # Lazily create the period so there is always a row to lock
            await session.execute(
                insert(UsagePeriodModel)
                .values(
                    account_id=account_id,
                    period_key=period_key,
                    viewed_resource_ids=[],
                    updated_at=now,
                )
                .on_conflict_do_nothing(index_elements=["account_id", "period_key"])
            )

            result = await session.execute(
                select(UsagePeriodModel.viewed_resource_ids)
                .where(
                    UsagePeriodModel.account_id == account_id,
                    UsagePeriodModel.period_key == period_key,
                )
                .with_for_update()
            )
            viewed = frozenset(result.scalar_one() or [])

            outcome, updated = update_fn(viewed)

            if updated is not None:
                await session.execute(
                    update(UsagePeriodModel)
                    .where(
                        UsagePeriodModel.account_id == account_id,
                        UsagePeriodModel.period_key == period_key,
                    )
                    .values(viewed_resource_ids=sorted(updated), updated_at=now)
                )
                logger.debug(
                    f"Recorded view for account {account_id} period {period_key}: "
                    f"{len(updated)} viewed"
                )

            return outcome

    @with_db_retry
    async def get_usage_period(self, account_id: str, period_key: str) -> Optional[UsagePeriod]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            result = await session.execute(
                select(UsagePeriodModel).where(
                    UsagePeriodModel.account_id == account_id,
                    UsagePeriodModel.period_key == period_key,
                )
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None

            return UsagePeriod(
                account_id=row.account_id,
                period_key=row.period_key,
                viewed_resource_ids=set(row.viewed_resource_ids or []),
                updated_at=row.updated_at,
            )
