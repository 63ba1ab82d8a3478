"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.enums import NonceScope, Role
from src.am_ledger.domain.models import LedgerEvent, MarketConfig


class MarketLedgerProtocol(Protocol):
    # --- configuration row ---
    async def get_config(self, db: AsyncSession) -> MarketConfig | None: ...

    async def create_config(self, db: AsyncSession, config: MarketConfig) -> MarketConfig: ...

    async def save_config(self, db: AsyncSession, config: MarketConfig) -> MarketConfig: ...

    # --- roles ---
    async def has_role(self, db: AsyncSession, role: Role, account: str) -> bool: ...

    async def grant_role(self, db: AsyncSession, role: Role, account: str) -> bool: ...

    async def revoke_role(self, db: AsyncSession, role: Role, account: str) -> bool: ...

    # --- deposited balances (native currency) ---
    async def get_balance(self, db: AsyncSession, account: str) -> int: ...

    async def credit_balance(self, db: AsyncSession, account: str, amount: int) -> int: ...

    async def debit_balance(self, db: AsyncSession, account: str, amount: int) -> int: ...

    # --- platform fee pool ---
    async def get_fee_balance(self, db: AsyncSession, currency: str) -> int: ...

    async def credit_fee(self, db: AsyncSession, currency: str, amount: int) -> int: ...

    async def take_fee_balance(self, db: AsyncSession, currency: str) -> int: ...

    # --- partner fee pools and rates ---
    async def get_partner_fee_balance(
        self, db: AsyncSession, partner: str, currency: str
    ) -> int: ...

    async def credit_partner_fee(
        self, db: AsyncSession, partner: str, currency: str, amount: int
    ) -> int: ...

    async def take_partner_fee_balance(
        self, db: AsyncSession, partner: str, currency: str
    ) -> int: ...

    async def get_partner_fee_rate(self, db: AsyncSession, partner: str) -> int: ...

    async def set_partner_fee_rate(self, db: AsyncSession, partner: str, rate: int) -> int: ...

    # --- replay sets ---
    async def is_nonce_used(self, db: AsyncSession, scope: NonceScope, nonce: str) -> bool: ...

    async def mark_nonce_used(self, db: AsyncSession, scope: NonceScope, nonce: str) -> bool: ...

    # --- whitelist ---
    async def is_whitelisted(self, db: AsyncSession, contract: str) -> bool: ...

    async def add_whitelisted(self, db: AsyncSession, contract: str) -> bool: ...

    async def remove_whitelisted(self, db: AsyncSession, contract: str) -> bool: ...

    # --- solvency ---
    async def total_liabilities(self, db: AsyncSession, currency: str) -> int: ...

    # --- structured event log ---
    async def record_event(
        self, db: AsyncSession, event_type: str, payload: dict[str, Any]
    ) -> LedgerEvent: ...

    async def list_events(
        self,
        db: AsyncSession,
        event_type: str | None,
        cursor_id: int | None,
        limit: int,
    ) -> list[LedgerEvent]: ...
