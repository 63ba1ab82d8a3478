"""Admin REST API — configuration, roles, pause and the event log.

Every mutating endpoint requires a JWT; the role it needs is enforced by the
access policy, not here.
"""

from fastapi import APIRouter, Query, Request

from src.am_admin.application.schemas import (
    AssetRegistryRequest,
    FeeRateRequest,
    MintFeesRequest,
    PartnerFeeRateRequest,
    RoleRequest,
    TransferAdminRequest,
    WhitelistRequest,
)
from src.am_admin.application.service import AdminApplicationService
from src.am_common.context import CallContext
from src.am_common.database import DbSession
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import CurrentAccount

router = APIRouter(prefix="/admin", tags=["admin"])

_service = AdminApplicationService()


@router.get("/config")
async def get_config(db: DbSession, request: Request) -> ApiResponse:
    data = await _service.get_config(db)
    return success_response(data.model_dump(), request)


@router.get("/whitelist/{contract}")
async def is_whitelisted(contract: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.is_whitelisted(db, contract)
    return success_response(data.model_dump(), request)


@router.post("/fee-rate")
async def set_fee_rate(
    body: FeeRateRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.set_fee_rate(db, CallContext(sender=account), body.fee_rate)
    return success_response(data.model_dump(), request)


@router.post("/mint-fees")
async def set_mint_fees(
    body: MintFeesRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.set_mint_fees(
        db, CallContext(sender=account), body.mint_fee, body.discount_mint_fee
    )
    return success_response(data.model_dump(), request)


@router.post("/asset-registry")
async def set_asset_registry(
    body: AssetRegistryRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.set_asset_registry(
        db, CallContext(sender=account), body.asset_registry
    )
    return success_response(data.model_dump(), request)


@router.post("/partner-fee-rate")
async def set_partner_fee_rate(
    body: PartnerFeeRateRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.set_partner_fee_rate(
        db, CallContext(sender=account), body.partner, body.rate
    )
    return success_response(data.model_dump(), request)


@router.post("/whitelist")
async def add_whitelisted(
    body: WhitelistRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.add_whitelisted(db, CallContext(sender=account), body.contract)
    return success_response(data.model_dump(), request)


@router.delete("/whitelist/{contract}")
async def remove_whitelisted(
    contract: str, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.remove_whitelisted(db, CallContext(sender=account), contract)
    return success_response(data.model_dump(), request)


@router.post("/roles/grant")
async def grant_role(
    body: RoleRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.grant_role(db, CallContext(sender=account), body.role, body.account)
    return success_response(data.model_dump(), request)


@router.post("/roles/revoke")
async def revoke_role(
    body: RoleRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.revoke_role(db, CallContext(sender=account), body.role, body.account)
    return success_response(data.model_dump(), request)


@router.post("/transfer")
async def transfer_admin(
    body: TransferAdminRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.transfer_admin(db, CallContext(sender=account), body.new_admin)
    return success_response(data.model_dump(), request)


@router.post("/pause")
async def pause(account: CurrentAccount, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.pause(db, CallContext(sender=account))
    return success_response(data.model_dump(), request)


@router.post("/unpause")
async def unpause(account: CurrentAccount, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.unpause(db, CallContext(sender=account))
    return success_response(data.model_dump(), request)


@router.get("/events")
async def list_events(
    db: DbSession,
    request: Request,
    event_type: str | None = Query(None, description="Filter by EventType"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_events(db, event_type, cursor, limit)
    return success_response(data.model_dump(), request)
