"""Payment settlement — moves value for a validated, priced trade.

Ordering inside every path: fund (pull) -> credit fee pools -> push seller
proceeds -> refund. Pool credits are internal ledger writes and always happen
before any value leaves the vault.

Native currency funding depends on FundingMode:
  BALANCE_ONLY    attached value is rejected; the buyer's deposited balance pays.
  ATTACHED_VALUE  non-zero attached value pays and any excess is refunded to the
                  caller; zero attached value falls back to the buyer's balance.

Token currency never accepts attached value. The vault pulls seller proceeds
buyer -> seller and the fee buyer -> vault through the buyer's allowance.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.address import NATIVE_CURRENCY
from src.am_common.context import CallContext
from src.am_common.enums import FundingMode
from src.am_common.errors import (
    AttachedValueNotAcceptedError,
    InsufficientAllowanceError,
    InsufficientValueError,
)
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_fees.domain.partner import PartnerShare, resolve_partner
from src.am_fees.domain.split import split_fee
from src.am_ledger.domain.models import MarketConfig
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_registry.domain.registry import AssetRegistryProtocol
from src.am_settlement.domain.models import FeeSplit, PaymentResult, ValidatedTrade

logger = logging.getLogger(__name__)


class PaymentEngine:
    def __init__(
        self,
        ledger: MarketLedgerProtocol,
        gateway: ValueGatewayProtocol,
        registry: AssetRegistryProtocol,
        funding_mode: FundingMode = FundingMode.BALANCE_ONLY,
    ) -> None:
        self._ledger = ledger
        self._gateway = gateway
        self._registry = registry
        self._funding_mode = funding_mode

    @property
    def funding_mode(self) -> FundingMode:
        return self._funding_mode

    async def settle(
        self,
        db: AsyncSession,
        ctx: CallContext,
        trade: ValidatedTrade,
        config: MarketConfig,
    ) -> PaymentResult:
        share = await resolve_partner(
            db, self._registry, self._ledger, trade.asset_contract, trade.token_id
        )
        split = split_fee(trade.price, config.fee_rate, share.rate if share else 0)

        if trade.currency == NATIVE_CURRENCY:
            return await self._settle_native(db, ctx, trade, split, share)
        return await self._settle_token(db, ctx, trade, split, share)

    async def _settle_native(
        self,
        db: AsyncSession,
        ctx: CallContext,
        trade: ValidatedTrade,
        split: FeeSplit,
        share: PartnerShare | None,
    ) -> PaymentResult:
        refund = 0
        if ctx.value > 0:
            if self._funding_mode is FundingMode.BALANCE_ONLY:
                raise AttachedValueNotAcceptedError(ctx.value)
            if ctx.value < trade.price:
                raise InsufficientValueError(trade.price, ctx.value)
            await self._gateway.receive_native(db, ctx.sender, ctx.value)
            refund = ctx.value - trade.price
            funded_from_balance = False
        else:
            await self._ledger.debit_balance(db, trade.buyer, trade.price)
            funded_from_balance = True

        await self._credit_pools(db, NATIVE_CURRENCY, split, share)
        await self._gateway.send_native(db, trade.seller, split.seller_amount)
        if refund:
            await self._gateway.send_native(db, ctx.sender, refund)

        logger.info(
            "Native payment token=%d price=%d seller=%d platform=%d partner=%d refund=%d",
            trade.token_id, trade.price, split.seller_amount,
            split.platform_fee, split.partner_fee, refund,
        )
        return PaymentResult(
            split=split,
            partner=share.partner if share and split.partner_fee else None,
            funded_from_balance=funded_from_balance,
            refund=refund,
        )

    async def _settle_token(
        self,
        db: AsyncSession,
        ctx: CallContext,
        trade: ValidatedTrade,
        split: FeeSplit,
        share: PartnerShare | None,
    ) -> PaymentResult:
        if ctx.value > 0:
            raise AttachedValueNotAcceptedError(ctx.value)

        token = trade.currency
        vault = self._gateway.vault
        allowance = await self._gateway.allowance(db, token, trade.buyer, vault)
        if allowance < trade.price:
            raise InsufficientAllowanceError(token, trade.price, allowance)

        await self._credit_pools(db, token, split, share)
        await self._gateway.token_transfer_from(
            db, token, trade.buyer, trade.seller, split.seller_amount
        )
        await self._gateway.token_transfer_from(db, token, trade.buyer, vault, split.total_fee)

        logger.info(
            "Token payment %s token=%d price=%d seller=%d platform=%d partner=%d",
            token, trade.token_id, trade.price, split.seller_amount,
            split.platform_fee, split.partner_fee,
        )
        return PaymentResult(
            split=split,
            partner=share.partner if share and split.partner_fee else None,
            funded_from_balance=False,
        )

    async def _credit_pools(
        self,
        db: AsyncSession,
        currency: str,
        split: FeeSplit,
        share: PartnerShare | None,
    ) -> None:
        if split.platform_fee:
            await self._ledger.credit_fee(db, currency, split.platform_fee)
        if share is not None and split.partner_fee:
            await self._ledger.credit_partner_fee(db, share.partner, currency, split.partner_fee)
