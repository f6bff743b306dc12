"""Admin console endpoints: account and strategy maintenance.

Every route requires a caller whose tier resolves to ADMIN. Deleting an
account removes its usage periods too; the identity provider's user is
managed outside this service.
"""

import logging

from fastapi import APIRouter, Depends, Query

from paywall.core.access import (
    Account,
    AccountNotFoundError,
    AccountUpdate,
    Identity,
    StrategyNotFoundError,
)
from paywall.core.strategies import StrategyInput, StrategySummary
from paywall.db.repositories import Repositories

from ..dependencies import get_repositories, require_admin
from ..schemas.admin import (
    AccountCreateRequest,
    AccountListResponse,
    AccountResponse,
    AccountUpdateRequest,
    DeleteResponse,
)
from ..schemas.errors import ADMIN_ERROR_RESPONSES
from ..schemas.strategies import StrategyListResponse, StrategyResponse

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)], responses=ADMIN_ERROR_RESPONSES)


# =============================================================================
# Accounts
# =============================================================================

@router.get(
    "/accounts",
    response_model=AccountListResponse,
    operation_id="adminListAccounts",
    summary="List accounts",
)
async def list_accounts(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repos: Repositories = Depends(get_repositories),
):
    """List accounts, newest first."""
    accounts = await repos.accounts.list_accounts(limit=limit, offset=offset)
    return AccountListResponse(accounts=accounts, limit=limit, offset=offset)


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=201,
    operation_id="adminCreateAccount",
    summary="Create an account record",
)
async def create_account(
    request: AccountCreateRequest,
    admin: Identity = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    """Create an account record for an existing identity. Idempotent per id."""
    account = await repos.accounts.create_account(Account(**request.model_dump()))
    logger.info(f"Admin {admin.account_id} created account {account.id}")
    return AccountResponse(account=account)


@router.patch(
    "/accounts/{account_id}",
    response_model=AccountResponse,
    operation_id="adminUpdateAccount",
    summary="Update an account's email, role or tier",
)
async def update_account(
    account_id: str,
    request: AccountUpdateRequest,
    admin: Identity = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    """Apply the fields present in the request; omitted fields are kept."""
    update = AccountUpdate(**request.model_dump(exclude_unset=True))
    account = await repos.accounts.update_account(account_id, update)
    if account is None:
        raise AccountNotFoundError(account_id)

    logger.info(f"Admin {admin.account_id} updated account {account_id}")
    return AccountResponse(account=account)


@router.delete(
    "/accounts/{account_id}",
    response_model=DeleteResponse,
    operation_id="adminDeleteAccount",
    summary="Delete an account and its usage history",
)
async def delete_account(
    account_id: str,
    admin: Identity = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    """Delete an account record and all of its usage periods."""
    if not await repos.accounts.delete_account(account_id):
        raise AccountNotFoundError(account_id)

    logger.info(f"Admin {admin.account_id} deleted account {account_id}")
    return DeleteResponse(id=account_id, message="Account deleted")


# =============================================================================
# Strategies
# =============================================================================

@router.get(
    "/strategies",
    response_model=StrategyListResponse,
    operation_id="adminListStrategies",
    summary="List all strategies, any status",
)
async def list_all_strategies(repos: Repositories = Depends(get_repositories)):
    strategies = await repos.strategies.list_strategies()
    summaries = [StrategySummary.model_validate(s) for s in strategies]
    return StrategyListResponse(success=True, strategies=summaries, total=len(summaries))


@router.post(
    "/strategies",
    response_model=StrategyResponse,
    status_code=201,
    operation_id="adminCreateStrategy",
    summary="Create a strategy",
)
async def create_strategy(
    request: StrategyInput,
    repos: Repositories = Depends(get_repositories),
):
    strategy = await repos.strategies.create_strategy(request)
    return StrategyResponse(strategy=strategy)


@router.put(
    "/strategies/{strategy_id}",
    response_model=StrategyResponse,
    operation_id="adminUpdateStrategy",
    summary="Replace a strategy's fields",
)
async def update_strategy(
    strategy_id: str,
    request: StrategyInput,
    repos: Repositories = Depends(get_repositories),
):
    strategy = await repos.strategies.update_strategy(strategy_id, request)
    if strategy is None:
        raise StrategyNotFoundError(strategy_id)
    return StrategyResponse(strategy=strategy)


@router.delete(
    "/strategies/{strategy_id}",
    response_model=DeleteResponse,
    operation_id="adminDeleteStrategy",
    summary="Delete a strategy",
)
async def delete_strategy(
    strategy_id: str,
    repos: Repositories = Depends(get_repositories),
):
    if not await repos.strategies.delete_strategy(strategy_id):
        raise StrategyNotFoundError(strategy_id)
    return DeleteResponse(id=strategy_id, message="Strategy deleted")
