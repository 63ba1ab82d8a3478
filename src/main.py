"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.am_account.api.router import router as account_router
from src.am_admin.api.router import router as admin_router
from src.am_admin.application.service import AdminApplicationService
from src.am_common.database import async_session_factory, engine
from src.am_common.errors import AppError
from src.am_common.redis_client import close_redis, get_redis
from src.am_common.response import error_response
from src.am_custody.api.router import router as custody_router
from src.am_fees.api.router import router as fees_router
from src.am_gateway.api.router import router as auth_router
from src.am_gateway.middleware.request_log import RequestLogMiddleware
from src.am_registry.api.router import router as assets_router
from src.am_settlement.api.router import router as settlement_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, bootstrap the ledger. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    async with async_session_factory() as session:
        await AdminApplicationService().bootstrap(session)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: [%d] %s", request.method, request.url.path, exc.code, exc.message)
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(settlement_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(fees_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(assets_router, prefix="/api/v1")
app.include_router(custody_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
