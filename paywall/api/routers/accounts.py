"""Self-service account endpoints for the calling identity."""

import logging

from fastapi import APIRouter, Depends

from paywall.core.access import Account, AccountNotFoundError, Identity
from paywall.db.repositories import Repositories

from ..dependencies import get_repositories, require_identity
from ..schemas.admin import AccountRegisterRequest, AccountResponse
from ..schemas.errors import BASE_ERROR_RESPONSES

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/me",
    response_model=AccountResponse,
    responses=BASE_ERROR_RESPONSES,
    operation_id="registerAccount",
    summary="Create the caller's account on first sign-in",
)
async def register_account(
    request: AccountRegisterRequest,
    identity: Identity = Depends(require_identity),
    repos: Repositories = Depends(get_repositories),
):
    """
    Create the caller's account record if it does not exist yet.

    New accounts start with no subscription tier. Calling again returns the
    existing record unchanged.
    """
    account = await repos.accounts.create_account(
        Account(id=identity.account_id, email=request.email)
    )
    return AccountResponse(account=account)


@router.get(
    "/me",
    response_model=AccountResponse,
    responses=BASE_ERROR_RESPONSES,
    operation_id="getAccount",
    summary="Get the caller's account",
)
async def get_account(
    identity: Identity = Depends(require_identity),
    repos: Repositories = Depends(get_repositories),
):
    account = await repos.accounts.get_account(identity.account_id)
    if account is None:
        raise AccountNotFoundError(identity.account_id)
    return AccountResponse(account=account)
