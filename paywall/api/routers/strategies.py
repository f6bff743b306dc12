"""Strategy read endpoints.

The list is public. The detail view runs an access decision first, so a
Curious Retail caller spends one monthly view per distinct strategy.
Signed-in callers can bookmark strategies; saving never spends a view.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from paywall.constants import DEFAULT_STRATEGY_STATUS, SAVED_STRATEGIES_LIMIT
from paywall.core.access import (
    AccessDeniedError,
    AccessService,
    DenialReason,
    Identity,
    StrategyNotFoundError,
)
from paywall.core.strategies import StrategySummary
from paywall.db.repositories import Repositories

from ..dependencies import (
    get_access_service,
    get_identity,
    get_repositories,
    get_request_time,
    require_identity,
)
from ..schemas.errors import SAVED_STRATEGY_ERROR_RESPONSES, STRATEGY_ERROR_RESPONSES
from ..schemas.strategies import (
    SavedStrategyListResponse,
    SavedStrategyResponse,
    StrategyListResponse,
    StrategyResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=StrategyListResponse,
    operation_id="listStrategies",
    summary="List active strategies",
)
async def list_strategies(repos: Repositories = Depends(get_repositories)):
    """List active strategies. Summaries only, never gated."""
    try:
        strategies = await repos.strategies.list_strategies(status=DEFAULT_STRATEGY_STATUS)
    except Exception as e:
        logger.error(f"Failed to list strategies: {e}")
        return StrategyListResponse(success=False, error="Failed to load strategies")

    summaries = [StrategySummary.model_validate(s) for s in strategies]
    return StrategyListResponse(success=True, strategies=summaries, total=len(summaries))


@router.get(
    "/saved",
    response_model=SavedStrategyListResponse,
    responses=SAVED_STRATEGY_ERROR_RESPONSES,
    operation_id="listSavedStrategies",
    summary="List the caller's saved strategies",
)
async def list_saved_strategies(
    identity: Identity = Depends(require_identity),
    repos: Repositories = Depends(get_repositories),
):
    """
    List the caller's saved strategies as summaries, most recently saved first.

    At most 30 are returned. Bookmarks whose strategy no longer exists are
    skipped.
    """
    saved = await repos.saved.list_saved_strategies(identity.account_id, SAVED_STRATEGIES_LIMIT)
    strategies = await repos.strategies.get_strategies([s.strategy_id for s in saved])

    summaries = [StrategySummary.model_validate(s) for s in strategies]
    return SavedStrategyListResponse(strategies=summaries, total=len(summaries))


@router.get(
    "/{strategy_id}",
    response_model=StrategyResponse,
    responses=STRATEGY_ERROR_RESPONSES,
    operation_id="getStrategy",
    summary="Get a strategy (gated)",
)
async def get_strategy(
    strategy_id: str,
    identity: Optional[Identity] = Depends(get_identity),
    service: AccessService = Depends(get_access_service),
    repos: Repositories = Depends(get_repositories),
    now: datetime = Depends(get_request_time),
):
    """
    Get full strategy details.

    Returns 401 with a login prompt when unauthenticated, 402 with an
    upgrade prompt when the monthly view limit is reached, and 404 when
    the strategy does not exist.
    """
    strategy_id = strategy_id.strip()
    if not strategy_id:
        raise StrategyNotFoundError(strategy_id)

    decision = await service.decide_access(identity, strategy_id, now)
    if not decision.granted:
        raise AccessDeniedError(decision.reason or DenialReason.UNAUTHENTICATED, strategy_id)

    strategy = await repos.strategies.get_strategy(strategy_id)
    if strategy is None:
        raise StrategyNotFoundError(strategy_id)

    return StrategyResponse(strategy=strategy, tier=decision.tier)


@router.put(
    "/{strategy_id}/saved",
    response_model=SavedStrategyResponse,
    responses=SAVED_STRATEGY_ERROR_RESPONSES,
    operation_id="saveStrategy",
    summary="Save a strategy",
)
async def save_strategy(
    strategy_id: str,
    identity: Identity = Depends(require_identity),
    repos: Repositories = Depends(get_repositories),
    now: datetime = Depends(get_request_time),
):
    """Bookmark a strategy. Saving it again keeps the first save time."""
    strategy_id = strategy_id.strip()
    if not strategy_id or await repos.strategies.get_strategy(strategy_id) is None:
        raise StrategyNotFoundError(strategy_id)

    saved = await repos.saved.save_strategy(identity.account_id, strategy_id, now)
    return SavedStrategyResponse(strategy_id=strategy_id, saved=True, saved_at=saved.saved_at)


@router.delete(
    "/{strategy_id}/saved",
    response_model=SavedStrategyResponse,
    responses=SAVED_STRATEGY_ERROR_RESPONSES,
    operation_id="unsaveStrategy",
    summary="Remove a saved strategy",
)
async def unsave_strategy(
    strategy_id: str,
    identity: Identity = Depends(require_identity),
    repos: Repositories = Depends(get_repositories),
):
    """Remove a bookmark. Removing one that is not saved is a no-op."""
    strategy_id = strategy_id.strip()
    await repos.saved.remove_saved_strategy(identity.account_id, strategy_id)
    return SavedStrategyResponse(strategy_id=strategy_id, saved=False)
