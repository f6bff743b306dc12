"""Strategy repository - paywalled strategy records in PostgreSQL."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, select

from paywall.core.access.exceptions import StorageUnavailableError
from paywall.core.strategies import Strategy, StrategyInput, normalize_strategy

from ..connection import DatabaseManager
from ..models import SavedStrategyModel, StrategyModel
from ..utils import model_to_dict, with_db_retry
from .base import StrategyRepository

logger = logging.getLogger(__name__)


def _to_strategy(row: StrategyModel) -> Strategy:
    return normalize_strategy(row.id, model_to_dict(row))


class SqlStrategyRepository(StrategyRepository):
    """Strategies stored in the ``strategies`` table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    @with_db_retry
    async def get_strategy(self, strategy_id: str) -> Optional[Strategy]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            row = await session.get(StrategyModel, strategy_id)
            if row is None:
                logger.warning(f"Strategy {strategy_id} not found")
                return None
            return _to_strategy(row)

    @with_db_retry
    async def list_strategies(self, status: Optional[str] = None) -> List[Strategy]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            stmt = select(StrategyModel).order_by(StrategyModel.created_at.desc())
            if status:
                stmt = stmt.where(StrategyModel.status == status)

            result = await session.execute(stmt)
            return [_to_strategy(row) for row in result.scalars().all()]

    @with_db_retry
    async def get_strategies(self, strategy_ids: List[str]) -> List[Strategy]:
        if not strategy_ids:
            return []

        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            result = await session.execute(
                select(StrategyModel).where(StrategyModel.id.in_(strategy_ids))
            )
            by_id = {row.id: _to_strategy(row) for row in result.scalars().all()}
            return [by_id[sid] for sid in strategy_ids if sid in by_id]

    @with_db_retry
    async def create_strategy(self, data: StrategyInput) -> Strategy:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            row = StrategyModel(id=uuid.uuid4().hex, **data.model_dump())
            session.add(row)
            await session.flush()

            logger.info(f"Created strategy {row.id} '{row.name}'")
            return _to_strategy(row)

    @with_db_retry
    async def update_strategy(self, strategy_id: str, data: StrategyInput) -> Optional[Strategy]:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            row = await session.get(StrategyModel, strategy_id)
            if row is None:
                return None

            for field, value in data.model_dump().items():
                setattr(row, field, value)
            await session.flush()

            logger.info(f"Updated strategy {strategy_id}")
            return _to_strategy(row)

    @with_db_retry
    async def delete_strategy(self, strategy_id: str) -> bool:
        async with self._db.session() as session:
            if session is None:
                raise StorageUnavailableError("Database disabled")

            await session.execute(
                delete(SavedStrategyModel).where(SavedStrategyModel.strategy_id == strategy_id)
            )
            result = await session.execute(
                delete(StrategyModel).where(StrategyModel.id == strategy_id)
            )
            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted strategy {strategy_id}")
            return deleted
