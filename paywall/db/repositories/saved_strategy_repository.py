"""Saved strategy repository - per-account bookmarks in PostgreSQL."""

import logging
from datetime import datetime
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from paywall.core.access.exceptions import StorageUnavailableError
from paywall.core.strategies import SavedStrategy

from ..connection import DatabaseManager
from ..models import SavedStrategyModel
from ..utils import with_db_retry
from .base import SavedStrategyRepository

logger = logging.getLogger(__name__)


class SqlSavedStrategyRepository(SavedStrategyRepository):
    """Bookmarks stored in the ``saved_strategies`` table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    async def save_strategy(self, account_id: str, strategy_id: str, now: datetime) -> SavedStrategy:
        try:
            return await self._save(account_id, strategy_id, now)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                f"Saving strategy {strategy_id} failed: {e}", account_id=account_id
            ) from e

    async def remove_saved_strategy(self, account_id: str, strategy_id: str) -> bool:
        try:
            return await self._remove(account_id, strategy_id)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                f"Removing saved strategy {strategy_id} failed: {e}", account_id=account_id
            ) from e

    async def list_saved_strategies(self, account_id: str, limit: int) -> List[SavedStrategy]:
        try:
            return await self._list(account_id, limit)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                f"Listing saved strategies failed: {e}", account_id=account_id
            ) from e

    @with_db_retry
    async def _save(self, account_id: str, strategy_id: str, now: datetime) -> SavedStrategy:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            await session.execute(
                insert(SavedStrategyModel)
                .values(account_id=account_id, strategy_id=strategy_id, saved_at=now)
                .on_conflict_do_nothing(index_elements=["account_id", "strategy_id"])
            )
            result = await session.execute(
                select(SavedStrategyModel).where(
                    SavedStrategyModel.account_id == account_id,
                    SavedStrategyModel.strategy_id == strategy_id,
                )
            )

            logger.info(f"Account {account_id} saved strategy {strategy_id}")
            return SavedStrategy.model_validate(result.scalar_one())

    @with_db_retry
    async def _remove(self, account_id: str, strategy_id: str) -> bool:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            result = await session.execute(
                delete(SavedStrategyModel).where(
                    SavedStrategyModel.account_id == account_id,
                    SavedStrategyModel.strategy_id == strategy_id,
                )
            )
            removed = result.rowcount > 0
            if removed:
                logger.info(f"Account {account_id} unsaved strategy {strategy_id}")
            return removed

    @with_db_retry
    async def _list(self, account_id: str, limit: int) -> List[SavedStrategy]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled", account_id=account_id)

            result = await session.execute(
                select(SavedStrategyModel)
                .where(SavedStrategyModel.account_id == account_id)
                .order_by(SavedStrategyModel.saved_at.desc())
                .limit(limit)
            )
            return [SavedStrategy.model_validate(row) for row in result.scalars().all()]
