"""Pydantic schemas and cursor utilities for the admin API."""

import base64
import json
from typing import Any

from pydantic import BaseModel, Field

from src.am_common.enums import Role
from src.am_ledger.domain.models import MAX_FEE_RATE, MAX_PARTNER_FEE_RATE, MarketConfig

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT event id into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class FeeRateRequest(BaseModel):
    fee_rate: int = Field(..., description=f"Platform fee in bps (max {MAX_FEE_RATE})")


class MintFeesRequest(BaseModel):
    mint_fee: int = Field(..., ge=0)
    discount_mint_fee: int = Field(..., ge=0)


class AssetRegistryRequest(BaseModel):
    asset_registry: str


class PartnerFeeRateRequest(BaseModel):
    partner: str
    rate: int = Field(..., description=f"Share of the fee in bps (max {MAX_PARTNER_FEE_RATE})")


class WhitelistRequest(BaseModel):
    contract: str


class RoleRequest(BaseModel):
    role: Role
    account: str


class TransferAdminRequest(BaseModel):
    new_admin: str


class MarketConfigResponse(BaseModel):
    schema_version: int
    admin: str
    fee_rate: int
    mint_fee: str
    discount_mint_fee: str
    asset_registry: str
    paused: bool

    @classmethod
    def from_config(cls, config: MarketConfig) -> "MarketConfigResponse":
        return cls(
            schema_version=config.schema_version,
            admin=config.admin,
            fee_rate=config.fee_rate,
            mint_fee=str(config.mint_fee),
            discount_mint_fee=str(config.discount_mint_fee),
            asset_registry=config.asset_registry,
            paused=config.paused,
        )


class PartnerFeeRateResponse(BaseModel):
    partner: str
    old_rate: int
    new_rate: int


class WhitelistResponse(BaseModel):
    contract: str
    whitelisted: bool
    changed: bool = False


class RoleResponse(BaseModel):
    role: Role
    account: str
    changed: bool


class EventItem(BaseModel):
    id: int
    event_type: str
    payload: dict[str, Any]
    created_at: str


class EventListResponse(BaseModel):
    items: list[EventItem]
    next_cursor: str | None
    has_more: bool
