"""Validation pipeline — authenticates an Order/Offer pair without mutating anything.

Every check here is a read. Nonce consumption happens at the very end of
settlement, so the pipeline may be re-run before commit with the same result.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.address import ZERO_ADDRESS
from src.am_common.enums import NonceScope
from src.am_common.errors import (
    AssetContractMismatchError,
    OfferExpiredError,
    OrderExpiredError,
    OwnerMismatchError,
    PriceMismatchError,
    ReceiverMismatchError,
    TokenIdMismatchError,
    UnsupportedAssetContractError,
)
from src.am_ledger.domain.models import MarketConfig
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_registry.domain.registry import AssetRegistryProtocol
from src.am_settlement.domain.models import Offer, Order, ValidatedTrade
from src.am_settlement.domain.replay import ReplayGuard
from src.am_signing.domain.verifier import SignatureVerifier

logger = logging.getLogger(__name__)


class ValidationPipeline:
    def __init__(
        self,
        verifier: SignatureVerifier,
        ledger: MarketLedgerProtocol,
        registry: AssetRegistryProtocol,
        replay: ReplayGuard,
    ) -> None:
        self._verifier = verifier
        self._ledger = ledger
        self._registry = registry
        self._replay = replay

    async def resolve_asset_contract(
        self, db: AsyncSession, config: MarketConfig, contract: str
    ) -> str:
        """Zero or the platform registry resolve to the registry; others must be whitelisted."""
        if contract == ZERO_ADDRESS or contract == config.asset_registry:
            return config.asset_registry
        if not await self._ledger.is_whitelisted(db, contract):
            raise UnsupportedAssetContractError(contract)
        return contract

    async def validate_order(
        self, db: AsyncSession, config: MarketConfig, order: Order, now: int
    ) -> str:
        """Return the seller: the order's signer, who must currently own the asset."""
        if now > order.expire_time:
            raise OrderExpiredError(order.expire_time, now)

        contract = await self.resolve_asset_contract(db, config, order.asset_contract)
        # Replay before ownership: a filled order's asset has moved, and the
        # resubmission must still report the consumed nonce.
        await self._replay.ensure_unused(db, NonceScope.ORDER, order.nonce)

        signer = self._verifier.recover_order_signer(order)
        owner = await self._registry.owner_of(db, contract, order.token_id)
        if signer != owner:
            raise OwnerMismatchError(signer, owner)
        return signer

    async def validate_offer(
        self, db: AsyncSession, config: MarketConfig, offer: Offer, order: Order, now: int
    ) -> str:
        """Return the buyer: the offer's signer."""
        if now > offer.expire_time:
            raise OfferExpiredError(offer.expire_time, now)
        if offer.price < order.min_price:
            raise PriceMismatchError(offer.price, order.min_price)
        if offer.token_id != order.token_id:
            raise TokenIdMismatchError(order.token_id, offer.token_id)

        order_contract = await self.resolve_asset_contract(db, config, order.asset_contract)
        offer_contract = await self.resolve_asset_contract(db, config, offer.asset_contract)
        if order_contract != offer_contract:
            raise AssetContractMismatchError(order_contract, offer_contract)

        await self._replay.ensure_unused(db, NonceScope.OFFER, offer.nonce)

        buyer = self._verifier.recover_offer_signer(offer)
        if order.receiver != ZERO_ADDRESS and order.receiver != buyer:
            raise ReceiverMismatchError(order.receiver, buyer)
        return buyer

    async def validate(
        self, db: AsyncSession, config: MarketConfig, order: Order, offer: Offer, now: int
    ) -> ValidatedTrade:
        seller = await self.validate_order(db, config, order, now)
        buyer = await self.validate_offer(db, config, offer, order, now)
        contract = await self.resolve_asset_contract(db, config, order.asset_contract)
        logger.debug(
            "Validated token %d on %s: seller=%s buyer=%s price=%d",
            order.token_id, contract, seller, buyer, offer.price,
        )
        return ValidatedTrade(
            seller=seller,
            buyer=buyer,
            asset_contract=contract,
            token_id=order.token_id,
            price=offer.price,
            currency=order.currency,
        )
