"""FeeApplicationService — fee pool reads and withdrawals."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.application.service import default_access_gate
from src.am_admin.domain.gate import AccessGate
from src.am_common.address import to_address, to_optional_address
from src.am_common.context import CallContext
from src.am_common.reentrancy import ReentrancyGuard, get_reentrancy_guard
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_custody.infrastructure.persistence import default_value_gateway
from src.am_fees.application.schemas import (
    FeeBalanceResponse,
    FeeWithdrawalResponse,
    PartnerFeeBalanceResponse,
    PartnerFeeRateResponse,
)
from src.am_fees.domain.withdrawals import FeeWithdrawals
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_ledger.infrastructure.persistence import MarketLedgerRepository


class FeeApplicationService:
    def __init__(
        self,
        ledger: MarketLedgerProtocol | None = None,
        gateway: ValueGatewayProtocol | None = None,
        gate: AccessGate | None = None,
        guard: ReentrancyGuard | None = None,
    ) -> None:
        self._ledger: MarketLedgerProtocol = ledger or MarketLedgerRepository()
        self._withdrawals = FeeWithdrawals(
            self._ledger,
            gateway or default_value_gateway(),
            gate or default_access_gate(self._ledger),
            guard or get_reentrancy_guard(),
        )

    async def get_fee_balance(self, db: AsyncSession, currency: str) -> FeeBalanceResponse:
        currency = to_address(currency, "currency")
        amount = await self._ledger.get_fee_balance(db, currency)
        return FeeBalanceResponse.of(currency, amount)

    async def get_partner_fee_balance(
        self, db: AsyncSession, partner: str, currency: str
    ) -> PartnerFeeBalanceResponse:
        partner = to_address(partner, "partner")
        currency = to_address(currency, "currency")
        amount = await self._ledger.get_partner_fee_balance(db, partner, currency)
        return PartnerFeeBalanceResponse.for_partner(partner, currency, amount)

    async def get_partner_fee_rate(
        self, db: AsyncSession, partner: str
    ) -> PartnerFeeRateResponse:
        partner = to_address(partner, "partner")
        rate = await self._ledger.get_partner_fee_rate(db, partner)
        return PartnerFeeRateResponse(partner=partner, rate=rate)

    async def withdraw_fees(
        self, db: AsyncSession, ctx: CallContext, currency: str | None
    ) -> FeeWithdrawalResponse:
        currency = to_optional_address(currency, "currency")
        try:
            amount = await self._withdrawals.withdraw_fees(db, ctx, currency)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return FeeWithdrawalResponse(to=ctx.sender, currency=currency, withdrawn=str(amount))

    async def withdraw_partner_fees(
        self, db: AsyncSession, ctx: CallContext, currency: str | None
    ) -> FeeWithdrawalResponse:
        currency = to_optional_address(currency, "currency")
        try:
            amount = await self._withdrawals.withdraw_partner_fees(db, ctx, currency)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return FeeWithdrawalResponse(to=ctx.sender, currency=currency, withdrawn=str(amount))
