"""Account HTTP router — register, login, profile, directory sync."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends

from goalplan.accounts.models import Account, AccountRead, LoginRequest, RegisterRequest, TokenResponse
from goalplan.accounts.security import create_access_token
from goalplan.accounts.service import AccountService
from goalplan.auth import verify_api_key
from goalplan.dependencies import get_account_service, get_current_account, get_member_sync, get_today
from goalplan.members.sync import MemberSyncService, SyncResult

router = APIRouter(prefix="/accounts", tags=["accounts"], dependencies=[Depends(verify_api_key)])


def _token_response(account: Account) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(account.id),
        account=AccountRead.model_validate(account.model_dump()),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    account = await service.register(data)
    return _token_response(account)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    account = await service.authenticate(data.identifier, data.password)
    return _token_response(account)


@router.get("/me", response_model=AccountRead)
async def me(account: Account = Depends(get_current_account)) -> AccountRead:
    return AccountRead.model_validate(account.model_dump())


@router.post("/me/sync", response_model=SyncResult)
async def sync_me(
    account: Account = Depends(get_current_account),
    sync: MemberSyncService = Depends(get_member_sync),
    today: date = Depends(get_today),
) -> SyncResult:
    _, result = await sync.sync_account(account, today=today)
    return result
