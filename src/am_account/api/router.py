"""Deposited balance REST API."""

from fastapi import APIRouter, Request

from src.am_account.application.schemas import DepositRequest, WithdrawRequest
from src.am_account.application.service import AccountApplicationService
from src.am_common.context import CallContext
from src.am_common.database import DbSession
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import CurrentAccount

router = APIRouter(prefix="/account", tags=["account"])

_service = AccountApplicationService()


@router.get("/{address}/balance")
async def get_balance(address: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.get_balance(db, address)
    return success_response(data.model_dump(), request)


@router.post("/deposit")
async def deposit(
    body: DepositRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    ctx = CallContext(sender=account, value=body.value)
    data = await _service.deposit(db, ctx, body.account)
    return success_response(data.model_dump(), request)


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.withdraw(db, CallContext(sender=account), body.account, body.amount)
    return success_response(data.model_dump(), request)
