"""Fee pool withdrawals.

Both pools are zeroed before the payout leaves the vault, and both run under
the shared reentrancy lock. An empty pool raises NothingToWithdrawError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.domain.gate import AccessGate
from src.am_common.address import NATIVE_CURRENCY
from src.am_common.context import CallContext
from src.am_common.enums import EventType, Operation
from src.am_common.errors import NothingToWithdrawError
from src.am_common.reentrancy import ReentrancyGuard
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_ledger.domain.invariants import assert_solvent
from src.am_ledger.domain.repository import MarketLedgerProtocol

logger = logging.getLogger(__name__)


class FeeWithdrawals:
    def __init__(
        self,
        ledger: MarketLedgerProtocol,
        gateway: ValueGatewayProtocol,
        gate: AccessGate,
        guard: ReentrancyGuard,
    ) -> None:
        self._ledger = ledger
        self._gateway = gateway
        self._gate = gate
        self._guard = guard

    async def withdraw_fees(self, db: AsyncSession, ctx: CallContext, currency: str) -> int:
        """Admin only: pay the whole platform pool for `currency` to the caller."""
        async with self._guard.hold():
            await self._gate.enter(db, Operation.WITHDRAW_FEES, ctx.sender)
            async with db.begin_nested():
                amount = await self._ledger.take_fee_balance(db, currency)
                if amount == 0:
                    raise NothingToWithdrawError(currency)
                await self._pay(db, currency, ctx.sender, amount)
                await self._ledger.record_event(
                    db,
                    EventType.FEES_WITHDRAWN.value,
                    {"to": ctx.sender, "currency": currency, "amount": str(amount)},
                )
                await assert_solvent(db, self._ledger, self._gateway, currency)
        logger.info("Platform fees withdrawn: %d of %s to %s", amount, currency, ctx.sender)
        return amount

    async def withdraw_partner_fees(
        self, db: AsyncSession, ctx: CallContext, currency: str
    ) -> int:
        """Any caller: pay the caller's own partner pool for `currency`."""
        async with self._guard.hold():
            await self._gate.enter(db, Operation.WITHDRAW_PARTNER_FEES, ctx.sender)
            async with db.begin_nested():
                amount = await self._ledger.take_partner_fee_balance(db, ctx.sender, currency)
                if amount == 0:
                    raise NothingToWithdrawError(currency)
                await self._pay(db, currency, ctx.sender, amount)
                await self._ledger.record_event(
                    db,
                    EventType.PARTNER_FEES_WITHDRAWN.value,
                    {"partner": ctx.sender, "currency": currency, "amount": str(amount)},
                )
                await assert_solvent(db, self._ledger, self._gateway, currency)
        logger.info("Partner fees withdrawn: %d of %s to %s", amount, currency, ctx.sender)
        return amount

    async def _pay(self, db: AsyncSession, currency: str, to: str, amount: int) -> None:
        if currency == NATIVE_CURRENCY:
            await self._gateway.send_native(db, to, amount)
        else:
            await self._gateway.token_transfer(db, currency, to, amount)
