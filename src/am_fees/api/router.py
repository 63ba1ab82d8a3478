"""Fee REST API — platform and partner pools."""

from fastapi import APIRouter, Request

from src.am_common.context import CallContext
from src.am_common.database import DbSession
from src.am_common.response import ApiResponse, success_response
from src.am_fees.application.schemas import WithdrawFeesRequest
from src.am_fees.application.service import FeeApplicationService
from src.am_gateway.auth.dependencies import CurrentAccount

router = APIRouter(prefix="/fees", tags=["fees"])

_service = FeeApplicationService()


@router.get("/partners/{partner}/rate")
async def get_partner_fee_rate(partner: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.get_partner_fee_rate(db, partner)
    return success_response(data.model_dump(), request)


@router.get("/partners/{partner}/{currency}")
async def get_partner_fee_balance(
    partner: str, currency: str, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.get_partner_fee_balance(db, partner, currency)
    return success_response(data.model_dump(), request)


@router.get("/{currency}")
async def get_fee_balance(currency: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.get_fee_balance(db, currency)
    return success_response(data.model_dump(), request)


@router.post("/withdraw")
async def withdraw_fees(
    body: WithdrawFeesRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.withdraw_fees(db, CallContext(sender=account), body.currency)
    return success_response(data.model_dump(), request)


@router.post("/partners/withdraw")
async def withdraw_partner_fees(
    body: WithdrawFeesRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.withdraw_partner_fees(db, CallContext(sender=account), body.currency)
    return success_response(data.model_dump(), request)
