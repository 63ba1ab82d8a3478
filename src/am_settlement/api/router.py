"""Settlement REST API — fulfil a signed Order/Offer pair, query nonce status."""

from fastapi import APIRouter, Request, status

from src.am_common.database import DbSession
from src.am_common.enums import NonceScope
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import CurrentAccount
from src.am_settlement.application.schemas import FulfillRequest
from src.am_settlement.application.service import SettlementApplicationService

router = APIRouter(prefix="/settlement", tags=["settlement"])

_service = SettlementApplicationService()


@router.post(
    "/fulfill",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Settle a signed order against a signed offer",
)
async def fulfill(
    body: FulfillRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.fulfill(db, account, body)
    resp = success_response(data.model_dump(), request)
    resp.message = "Order fulfilled"
    return resp


@router.get("/nonces/{scope}/{nonce}")
async def nonce_status(
    scope: NonceScope, nonce: str, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.nonce_status(db, scope, nonce)
    return success_response(data.model_dump(), request)
