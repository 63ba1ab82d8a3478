"""Asset registry REST API."""

from fastapi import APIRouter, Request

from src.am_common.context import CallContext
from src.am_common.database import DbSession
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import CurrentAccount
from src.am_registry.application.schemas import (
    ApproveAssetRequest,
    MintRequest,
    MintWithRoleRequest,
    SetCreatorRequest,
)
from src.am_registry.application.service import RegistryApplicationService

router = APIRouter(prefix="/assets", tags=["assets"])

_service = RegistryApplicationService()


@router.post("/mint")
async def mint(
    body: MintRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.mint(db, CallContext(sender=account), body)
    return success_response(data.model_dump(), request)


@router.post("/mint-with-role")
async def mint_with_role(
    body: MintWithRoleRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.mint_with_role(db, CallContext(sender=account), body)
    return success_response(data.model_dump(), request)


@router.post("/approve")
async def approve(
    body: ApproveAssetRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.approve(db, CallContext(sender=account), body)
    return success_response(data.model_dump(), request)


@router.post("/creator")
async def set_creator(
    body: SetCreatorRequest, account: CurrentAccount, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.set_creator(db, CallContext(sender=account), body)
    return success_response(data.model_dump(), request)


@router.get("/{contract}/{token_id}")
async def get_asset(contract: str, token_id: int, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.get_asset(db, contract, token_id)
    return success_response(data.model_dump(), request)
