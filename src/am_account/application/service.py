"""AccountApplicationService — thin composition layer over BalanceBook.

Deposit and withdraw commit on success and roll back on any exception.
get_balance is read-only and runs without an explicit transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_account.application.schemas import BalanceResponse, DepositResponse, WithdrawResponse
from src.am_account.domain.balances import BalanceBook
from src.am_admin.application.service import default_access_gate
from src.am_admin.domain.gate import AccessGate
from src.am_common.address import to_address, to_nonzero_address
from src.am_common.context import CallContext
from src.am_common.reentrancy import ReentrancyGuard, get_reentrancy_guard
from src.am_common.units import format_units
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_custody.infrastructure.persistence import default_value_gateway
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_ledger.infrastructure.persistence import MarketLedgerRepository


class AccountApplicationService:
    def __init__(
        self,
        ledger: MarketLedgerProtocol | None = None,
        gateway: ValueGatewayProtocol | None = None,
        gate: AccessGate | None = None,
        guard: ReentrancyGuard | None = None,
    ) -> None:
        ledger = ledger or MarketLedgerRepository()
        self._book = BalanceBook(
            ledger,
            gateway or default_value_gateway(),
            gate or default_access_gate(ledger),
            guard or get_reentrancy_guard(),
        )

    async def get_balance(self, db: AsyncSession, account: str) -> BalanceResponse:
        account = to_address(account, "account")
        return BalanceResponse.of(account, await self._book.get_balance(db, account))

    async def deposit(
        self, db: AsyncSession, ctx: CallContext, account: str | None
    ) -> DepositResponse:
        beneficiary = to_nonzero_address(account, "account") if account else ctx.sender
        try:
            balance = await self._book.deposit(db, ctx, beneficiary)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return DepositResponse(
            account=beneficiary,
            balance=str(balance),
            balance_display=format_units(balance),
            deposited=str(ctx.value),
        )

    async def withdraw(
        self, db: AsyncSession, ctx: CallContext, account: str | None, amount: int
    ) -> WithdrawResponse:
        owner = to_nonzero_address(account, "account") if account else ctx.sender
        try:
            balance = await self._book.withdraw(db, ctx, owner, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WithdrawResponse(
            account=owner,
            balance=str(balance),
            balance_display=format_units(balance),
            withdrawn=str(amount),
        )
