"""Deposited native balances — the funding source for balance-funded settlement and mint fees.

deposit:  attached value moves caller -> vault and is credited to `account`
          (depositing on someone else's behalf is allowed).
withdraw: only the account itself or an ADMIN may withdraw; the balance is
          debited before value leaves the vault.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.domain.gate import AccessGate
from src.am_common.address import NATIVE_CURRENCY
from src.am_common.context import CallContext
from src.am_common.enums import EventType, Operation, Role
from src.am_common.errors import InvalidAmountError, MissingRoleError
from src.am_common.reentrancy import ReentrancyGuard
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_ledger.domain.invariants import assert_solvent
from src.am_ledger.domain.repository import MarketLedgerProtocol

logger = logging.getLogger(__name__)


class BalanceBook:
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

    async def get_balance(self, db: AsyncSession, account: str) -> int:
        return await self._ledger.get_balance(db, account)

    async def deposit(self, db: AsyncSession, ctx: CallContext, account: str) -> int:
        """Credit the attached value to `account`. Returns the new balance."""
        await self._gate.enter(db, Operation.DEPOSIT, ctx.sender)
        if ctx.value <= 0:
            raise InvalidAmountError(ctx.value)

        async with db.begin_nested():
            await self._gateway.receive_native(db, ctx.sender, ctx.value)
            balance = await self._ledger.credit_balance(db, account, ctx.value)
            await self._ledger.record_event(
                db,
                EventType.DEPOSITED.value,
                {"from": ctx.sender, "account": account, "amount": str(ctx.value)},
            )
            await assert_solvent(db, self._ledger, self._gateway, NATIVE_CURRENCY)
        logger.info("Deposit %d to %s by %s", ctx.value, account, ctx.sender)
        return balance

    async def withdraw(
        self, db: AsyncSession, ctx: CallContext, account: str, amount: int
    ) -> int:
        """Pay `amount` of `account`'s balance out to `account`. Returns the new balance."""
        async with self._guard.hold():
            await self._gate.enter(db, Operation.WITHDRAW, ctx.sender)
            if ctx.sender != account and not await self._gate.has_role(
                db, Role.ADMIN, ctx.sender
            ):
                raise MissingRoleError(ctx.sender, Role.ADMIN.value)
            if amount <= 0:
                raise InvalidAmountError(amount)

            async with db.begin_nested():
                balance = await self._ledger.debit_balance(db, account, amount)
                await self._gateway.send_native(db, account, amount)
                await self._ledger.record_event(
                    db,
                    EventType.WITHDRAWN.value,
                    {"by": ctx.sender, "account": account, "amount": str(amount)},
                )
                await assert_solvent(db, self._ledger, self._gateway, NATIVE_CURRENCY)
        logger.info("Withdraw %d from %s by %s", amount, account, ctx.sender)
        return balance
