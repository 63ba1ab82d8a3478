"""Auth API router: wallet challenge and login.

All endpoints return ApiResponse[T]. request_id is read from
request.state (injected by RequestLogMiddleware).
"""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Request, status

from config.settings import settings
from src.am_common.address import to_address
from src.am_common.redis_client import get_redis
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.application.schemas import (
    ChallengeRequest,
    ChallengeResponse,
    LoginRequest,
    LoginResponse,
)
from src.am_gateway.auth.wallet_login import WalletLoginService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = WalletLoginService()


@router.post(
    "/challenge",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Issue a wallet login challenge",
)
async def challenge(
    request: Request,
    body: ChallengeRequest,
    redis: aioredis.Redis = Depends(get_redis),
) -> ApiResponse:
    message = await _service.issue_challenge(redis, body.address)
    data = ChallengeResponse(
        address=to_address(body.address, "address"),
        message=message,
        expires_in=settings.LOGIN_CHALLENGE_TTL_SECONDS,
    )
    return success_response(data.model_dump(), request)


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Exchange a signed challenge for an access token",
)
async def login(
    request: Request,
    body: LoginRequest,
    redis: aioredis.Redis = Depends(get_redis),
) -> ApiResponse:
    token = await _service.login(redis, body.address, body.signature)
    data = LoginResponse(
        access_token=token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        address=to_address(body.address, "address"),
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Login successful"
    return resp
