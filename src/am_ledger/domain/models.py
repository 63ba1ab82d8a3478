"""Domain models for am_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

CURRENT_SCHEMA_VERSION = 2  # v1 stored numeric nonces; v2 stores bytes32 nonces
MAX_FEE_RATE = 1000         # 10% in bps
MAX_PARTNER_FEE_RATE = 10000


@dataclass(frozen=True)
class MarketConfig:
    """The singleton configuration row of the market ledger."""
    admin: str
    fee_rate: int             # bps, <= MAX_FEE_RATE
    mint_fee: int
    discount_mint_fee: int
    asset_registry: str
    paused: bool = False
    schema_version: int = CURRENT_SCHEMA_VERSION

    def with_changes(self, **changes: Any) -> "MarketConfig":
        return replace(self, **changes)


@dataclass
class LedgerEvent:
    id: int
    event_type: str
    payload: dict[str, Any]
    created_at: datetime | None = None
