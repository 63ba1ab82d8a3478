"""SettlementEngine — fulfils one matched Order/Offer pair atomically.

Sequence (all inside the reentrancy lock and one savepoint):
  1. entry gate: ledger initialized, FULFILL not paused
  2. zero-price offer with attached value is rejected
  3. validation pipeline -> seller, buyer, resolved asset contract
  4. asset transfer (proof-gated when the offer asks for it)
  5. payment settlement when price > 0
  6. consume order nonce, then offer nonce (last ledger mutation)
  7. ORDER_FULFILLED event, solvency check for the settled currency

Any exception rolls the savepoint back, so a failed fulfil leaves balances,
ownership and both nonce sets exactly as they were. The nonces stay unused and
the same pair can be retried.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.domain.gate import AccessGate
from src.am_common.context import CallContext
from src.am_common.enums import EventType, NonceScope, Operation
from src.am_common.errors import ZeroPriceWithValueError
from src.am_common.reentrancy import ReentrancyGuard
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_ledger.domain.invariants import assert_solvent
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_registry.domain.models import TransferProof
from src.am_registry.domain.registry import AssetRegistryProtocol
from src.am_settlement.domain.models import (
    Offer,
    Order,
    PaymentResult,
    SettlementResult,
    ValidatedTrade,
)
from src.am_settlement.domain.payment import PaymentEngine
from src.am_settlement.domain.replay import ReplayGuard
from src.am_settlement.domain.validation import ValidationPipeline

logger = logging.getLogger(__name__)


class SettlementEngine:
    def __init__(
        self,
        gate: AccessGate,
        ledger: MarketLedgerProtocol,
        registry: AssetRegistryProtocol,
        gateway: ValueGatewayProtocol,
        validation: ValidationPipeline,
        payment: PaymentEngine,
        replay: ReplayGuard,
        guard: ReentrancyGuard,
    ) -> None:
        self._gate = gate
        self._ledger = ledger
        self._registry = registry
        self._gateway = gateway
        self._validation = validation
        self._payment = payment
        self._replay = replay
        self._guard = guard

    async def fulfill(
        self,
        db: AsyncSession,
        ctx: CallContext,
        order: Order,
        offer: Offer,
        proofs: list[TransferProof] | None = None,
    ) -> SettlementResult:
        async with self._guard.hold():
            config = await self._gate.enter(db, Operation.FULFILL, ctx.sender)
            if offer.price == 0 and ctx.value > 0:
                raise ZeroPriceWithValueError(ctx.value)

            async with db.begin_nested():
                trade = await self._validation.validate(db, config, order, offer, ctx.now)
                await self._transfer_asset(db, trade, offer.need_proof, proofs or [])

                payment: PaymentResult | None = None
                if trade.price > 0:
                    payment = await self._payment.settle(db, ctx, trade, config)

                await self._replay.consume(db, NonceScope.ORDER, order.nonce)
                await self._replay.consume(db, NonceScope.OFFER, offer.nonce)

                result = SettlementResult(
                    seller=trade.seller,
                    buyer=trade.buyer,
                    token_id=trade.token_id,
                    price=trade.price,
                    currency=trade.currency,
                    asset_contract=trade.asset_contract,
                    order_nonce=order.nonce,
                    offer_nonce=offer.nonce,
                    payment=payment,
                )
                await self._ledger.record_event(
                    db, EventType.ORDER_FULFILLED.value, _fulfilled_payload(result)
                )
                await assert_solvent(db, self._ledger, self._gateway, trade.currency)

        logger.info(
            "Fulfilled %s#%d seller=%s buyer=%s price=%d currency=%s",
            result.asset_contract, result.token_id, result.seller,
            result.buyer, result.price, result.currency,
        )
        return result

    async def _transfer_asset(
        self,
        db: AsyncSession,
        trade: ValidatedTrade,
        need_proof: bool,
        proofs: list[TransferProof],
    ) -> None:
        operator = self._gateway.vault
        if need_proof:
            await self._registry.i_transfer_from(
                db, trade.asset_contract, operator, trade.seller, trade.buyer,
                trade.token_id, proofs,
            )
        else:
            await self._registry.transfer_from(
                db, trade.asset_contract, operator, trade.seller, trade.buyer, trade.token_id
            )


def _fulfilled_payload(result: SettlementResult) -> dict[str, object]:
    payload: dict[str, object] = {
        "seller": result.seller,
        "buyer": result.buyer,
        "token_id": result.token_id,
        "price": str(result.price),
        "currency": result.currency,
        "asset_contract": result.asset_contract,
        "order_nonce": result.order_nonce,
        "offer_nonce": result.offer_nonce,
    }
    if result.payment is not None:
        split = result.payment.split
        payload.update(
            {
                "seller_amount": str(split.seller_amount),
                "platform_fee": str(split.platform_fee),
                "partner_fee": str(split.partner_fee),
                "partner": result.payment.partner,
                "refund": str(result.payment.refund),
            }
        )
    return payload
