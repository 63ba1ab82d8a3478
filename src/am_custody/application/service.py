"""CustodyApplicationService — wallet holdings, token approvals, operator funding."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.application.service import default_access_gate
from src.am_admin.domain.gate import AccessGate
from src.am_common.address import to_address, to_nonzero_address, to_optional_address
from src.am_common.context import CallContext
from src.am_common.enums import EventType, Operation
from src.am_custody.application.schemas import AllowanceResponse, HoldingsResponse
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_custody.infrastructure.persistence import default_value_gateway
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_ledger.infrastructure.persistence import MarketLedgerRepository

logger = logging.getLogger(__name__)


class CustodyApplicationService:
    def __init__(
        self,
        ledger: MarketLedgerProtocol | None = None,
        gateway: ValueGatewayProtocol | None = None,
        gate: AccessGate | None = None,
    ) -> None:
        self._ledger: MarketLedgerProtocol = ledger or MarketLedgerRepository()
        self._gateway: ValueGatewayProtocol = gateway or default_value_gateway()
        self._gate = gate or default_access_gate(self._ledger)

    async def holdings(self, db: AsyncSession, owner: str, currency: str) -> HoldingsResponse:
        owner = to_address(owner, "owner")
        currency = to_address(currency, "currency")
        amount = await self._gateway.holdings(db, owner, currency)
        return HoldingsResponse.of(owner, currency, amount)

    async def approve(
        self,
        db: AsyncSession,
        ctx: CallContext,
        token: str,
        amount: int,
        spender: str | None,
    ) -> AllowanceResponse:
        token = to_nonzero_address(token, "token")
        spender = to_address(spender, "spender") if spender else self._gateway.vault
        try:
            await self._gateway.approve(db, token, ctx.sender, spender, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AllowanceResponse(
            token=token, owner=ctx.sender, spender=spender, amount=str(amount)
        )

    async def credit_wallet(
        self,
        db: AsyncSession,
        ctx: CallContext,
        owner: str,
        currency: str | None,
        amount: int,
    ) -> HoldingsResponse:
        """OPERATOR only: record inbound funds arriving in `owner`'s wallet."""
        owner = to_address(owner, "owner")
        currency = to_optional_address(currency, "currency")
        try:
            await self._gate.require(db, Operation.CREDIT_WALLET, ctx.sender)
            balance = await self._gateway.credit_wallet(db, owner, currency, amount)
            await self._ledger.record_event(
                db,
                EventType.WALLET_CREDITED.value,
                {"owner": owner, "currency": currency, "amount": str(amount), "by": ctx.sender},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Wallet %s credited %d of %s by %s", owner, amount, currency, ctx.sender)
        return HoldingsResponse.of(owner, currency, balance)
