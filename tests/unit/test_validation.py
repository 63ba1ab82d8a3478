"""Unit tests for the validation pipeline."""

from dataclasses import replace

import pytest
from eth_utils import to_checksum_address

from src.am_common.address import to_nonce
from src.am_common.enums import NonceScope
from src.am_common.errors import (
    AssetContractMismatchError,
    InvalidSignatureLengthError,
    OfferAlreadyUsedError,
    OfferExpiredError,
    OrderAlreadyUsedError,
    OrderExpiredError,
    OwnerMismatchError,
    PriceMismatchError,
    ReceiverMismatchError,
    TokenIdMismatchError,
    UnsupportedAssetContractError,
)
from src.am_settlement.domain.validation import ValidationPipeline
from tests.fakes import REGISTRY
from tests.support import (
    BUYER,
    ETHER,
    FAR_FUTURE,
    NOW,
    SELLER,
    STRANGER,
    STRANGER_KEY,
    Market,
)

EXTERNAL = to_checksum_address("0x00000000000000000000000000000000000e7e71")


def _pipeline(market: Market) -> ValidationPipeline:
    return ValidationPipeline(market.verifier, market.ledger, market.registry, market.replay)


class TestValidateHappyPath:
    async def test_returns_authenticated_parties(self, market: Market) -> None:
        trade = await _pipeline(market).validate(
            None, market.ledger.config, market.order(), market.offer(price=120 * ETHER), NOW
        )
        assert trade.seller == SELLER
        assert trade.buyer == BUYER
        assert trade.asset_contract == REGISTRY
        assert trade.price == 120 * ETHER

    async def test_expiry_boundary_is_inclusive(self, market: Market) -> None:
        order = market.order(expire_time=NOW)
        offer = market.offer(expire_time=NOW)
        await _pipeline(market).validate(None, market.ledger.config, order, offer, NOW)

    async def test_validation_does_not_consume_nonces(self, market: Market) -> None:
        pipeline = _pipeline(market)
        order, offer = market.order(), market.offer()
        await pipeline.validate(None, market.ledger.config, order, offer, NOW)
        await pipeline.validate(None, market.ledger.config, order, offer, NOW)
        assert market.ledger.nonces == set()

    async def test_explicit_registry_address_matches_zero(self, market: Market) -> None:
        order = market.order()
        offer = market.offer(asset_contract=REGISTRY)
        trade = await _pipeline(market).validate(None, market.ledger.config, order, offer, NOW)
        assert trade.asset_contract == REGISTRY

    async def test_receiver_restricted_to_buyer(self, market: Market) -> None:
        order = market.order(receiver=BUYER)
        trade = await _pipeline(market).validate(
            None, market.ledger.config, order, market.offer(), NOW
        )
        assert trade.buyer == BUYER

    async def test_whitelisted_external_contract(self, market: Market) -> None:
        market.ledger.whitelist.add(EXTERNAL)
        market.assets.put(EXTERNAL, 9, SELLER)
        order = market.order(token_id=9, asset_contract=EXTERNAL)
        offer = market.offer(token_id=9, asset_contract=EXTERNAL)
        trade = await _pipeline(market).validate(None, market.ledger.config, order, offer, NOW)
        assert trade.asset_contract == EXTERNAL


class TestValidateOrderFailures:
    async def test_expired_order(self, market: Market) -> None:
        with pytest.raises(OrderExpiredError):
            await _pipeline(market).validate(
                None, market.ledger.config, market.order(expire_time=NOW - 1), market.offer(), NOW
            )

    async def test_expiry_checked_before_signature(self, market: Market) -> None:
        order = replace(market.order(expire_time=NOW - 1), signature=b"\x00" * 10)
        with pytest.raises(OrderExpiredError):
            await _pipeline(market).validate(None, market.ledger.config, order, market.offer(), NOW)

    async def test_malformed_signature(self, market: Market) -> None:
        order = replace(market.order(), signature=b"\x00" * 64)
        with pytest.raises(InvalidSignatureLengthError):
            await _pipeline(market).validate(None, market.ledger.config, order, market.offer(), NOW)

    async def test_signer_not_owner(self, market: Market) -> None:
        order = market.order(key=STRANGER_KEY)
        with pytest.raises(OwnerMismatchError):
            await _pipeline(market).validate(None, market.ledger.config, order, market.offer(), NOW)

    async def test_tampered_order_fails_ownership(self, market: Market) -> None:
        order = replace(market.order(), min_price=1)
        with pytest.raises(OwnerMismatchError):
            await _pipeline(market).validate(None, market.ledger.config, order, market.offer(), NOW)

    async def test_used_order_nonce(self, market: Market) -> None:
        market.ledger.nonces.add((NonceScope.ORDER, to_nonce(1)))
        with pytest.raises(OrderAlreadyUsedError):
            await _pipeline(market).validate(
                None, market.ledger.config, market.order(), market.offer(), NOW
            )

    async def test_unlisted_contract(self, market: Market) -> None:
        order = market.order(asset_contract=EXTERNAL)
        with pytest.raises(UnsupportedAssetContractError):
            await _pipeline(market).validate(None, market.ledger.config, order, market.offer(), NOW)


class TestValidateOfferFailures:
    async def test_expired_offer(self, market: Market) -> None:
        with pytest.raises(OfferExpiredError):
            await _pipeline(market).validate(
                None, market.ledger.config, market.order(), market.offer(expire_time=NOW - 1), NOW
            )

    async def test_price_below_minimum(self, market: Market) -> None:
        offer = market.offer(price=100 * ETHER - 1)
        with pytest.raises(PriceMismatchError):
            await _pipeline(market).validate(None, market.ledger.config, market.order(), offer, NOW)

    async def test_token_id_mismatch(self, market: Market) -> None:
        offer = market.offer(token_id=2)
        with pytest.raises(TokenIdMismatchError):
            await _pipeline(market).validate(None, market.ledger.config, market.order(), offer, NOW)

    async def test_contract_mismatch(self, market: Market) -> None:
        market.ledger.whitelist.add(EXTERNAL)
        offer = market.offer(asset_contract=EXTERNAL)
        with pytest.raises(AssetContractMismatchError):
            await _pipeline(market).validate(None, market.ledger.config, market.order(), offer, NOW)

    async def test_receiver_mismatch(self, market: Market) -> None:
        order = market.order(receiver=STRANGER)
        with pytest.raises(ReceiverMismatchError):
            await _pipeline(market).validate(None, market.ledger.config, order, market.offer(), NOW)

    async def test_used_offer_nonce(self, market: Market) -> None:
        market.ledger.nonces.add((NonceScope.OFFER, to_nonce(1)))
        with pytest.raises(OfferAlreadyUsedError):
            await _pipeline(market).validate(
                None, market.ledger.config, market.order(), market.offer(), NOW
            )

    async def test_far_future_is_not_expired(self, market: Market) -> None:
        offer = market.offer(expire_time=FAR_FUTURE)
        await _pipeline(market).validate_offer(
            None, market.ledger.config, offer, market.order(), NOW
        )
