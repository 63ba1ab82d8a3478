"""Custody REST API — holdings, token approvals, operator funding."""

from fastapi import APIRouter, Request

from src.am_common.context import CallContext
from src.am_common.database import DbSession
from src.am_common.response import ApiResponse, success_response
from src.am_custody.application.schemas import CreditWalletRequest, TokenApproveRequest
from src.am_custody.application.service import CustodyApplicationService
from src.am_gateway.auth.dependencies import CurrentAccount

router = APIRouter(prefix="/custody", tags=["custody"])

_service = CustodyApplicationService()


@router.post("/approve")
async def approve(
    body: TokenApproveRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.approve(
        db, CallContext(sender=account), body.token, body.amount, body.spender
    )
    return success_response(data.model_dump(), request)


@router.post("/credit")
async def credit_wallet(
    body: CreditWalletRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.credit_wallet(
        db, CallContext(sender=account), body.owner, body.currency, body.amount
    )
    return success_response(data.model_dump(), request)


@router.get("/{owner}/{currency}")
async def holdings(owner: str, currency: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.holdings(db, owner, currency)
    return success_response(data.model_dump(), request)
