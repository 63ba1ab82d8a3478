"""Unit tests for PaymentEngine: native (both funding modes) and token paths."""

import pytest
from eth_utils import to_checksum_address

from src.am_common.address import NATIVE_CURRENCY
from src.am_common.context import CallContext
from src.am_common.enums import FundingMode
from src.am_common.errors import (
    AttachedValueNotAcceptedError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InsufficientValueError,
)
from src.am_settlement.domain.models import ValidatedTrade
from src.am_settlement.domain.payment import PaymentEngine
from tests.fakes import MARKET, REGISTRY
from tests.support import BUYER, ETHER, SELLER, STRANGER, Market, build_market

TOKEN = to_checksum_address("0x00000000000000000000000000000000000070c3")


def _trade(price: int = 100 * ETHER, currency: str = NATIVE_CURRENCY) -> ValidatedTrade:
    return ValidatedTrade(
        seller=SELLER,
        buyer=BUYER,
        asset_contract=REGISTRY,
        token_id=1,
        price=price,
        currency=currency,
    )


def _engine(market: Market, mode: FundingMode = FundingMode.BALANCE_ONLY) -> PaymentEngine:
    return PaymentEngine(market.ledger, market.gateway, market.registry, mode)


class TestNativeBalanceOnly:
    async def test_balance_pays_seller_and_platform(self, market: Market) -> None:
        market.fund_buyer_balance(100 * ETHER)
        result = await _engine(market).settle(
            None, CallContext(sender=BUYER, now=0), _trade(), market.ledger.config
        )
        assert result.funded_from_balance is True
        assert result.refund == 0
        assert result.partner is None
        assert market.ledger.balances[BUYER] == 0
        assert market.gateway.held(SELLER) == 975 * 10**17
        assert market.ledger.fees[NATIVE_CURRENCY] == 25 * 10**17
        assert market.gateway.held(MARKET) == 25 * 10**17

    async def test_attached_value_rejected(self, market: Market) -> None:
        market.fund_buyer_balance(100 * ETHER)
        with pytest.raises(AttachedValueNotAcceptedError):
            await _engine(market).settle(
                None,
                CallContext(sender=BUYER, value=100 * ETHER, now=0),
                _trade(),
                market.ledger.config,
            )

    async def test_insufficient_balance(self, market: Market) -> None:
        market.fund_buyer_balance(99 * ETHER)
        with pytest.raises(InsufficientBalanceError):
            await _engine(market).settle(
                None, CallContext(sender=BUYER, now=0), _trade(), market.ledger.config
            )

    async def test_partner_share_credited(self, market: Market) -> None:
        market.assets.assets[(REGISTRY, 1)].creator = STRANGER
        market.ledger.partner_rates[STRANGER] = 4000
        market.fund_buyer_balance(100 * ETHER)
        result = await _engine(market).settle(
            None, CallContext(sender=BUYER, now=0), _trade(), market.ledger.config
        )
        assert result.partner == STRANGER
        assert result.split.partner_fee == ETHER
        assert market.ledger.partner_fees[(STRANGER, NATIVE_CURRENCY)] == ETHER
        assert market.ledger.fees[NATIVE_CURRENCY] == 15 * 10**17
        assert market.gateway.held(MARKET) == 25 * 10**17


class TestNativeAttachedValue:
    @pytest.fixture
    def market(self) -> Market:
        return build_market(FundingMode.ATTACHED_VALUE)

    async def test_excess_value_refunded(self, market: Market) -> None:
        market.gateway.fund(BUYER, 150 * ETHER)
        result = await _engine(market, FundingMode.ATTACHED_VALUE).settle(
            None,
            CallContext(sender=BUYER, value=150 * ETHER, now=0),
            _trade(),
            market.ledger.config,
        )
        assert result.funded_from_balance is False
        assert result.refund == 50 * ETHER
        assert market.gateway.held(BUYER) == 50 * ETHER
        assert market.gateway.held(SELLER) == 975 * 10**17
        assert market.gateway.held(MARKET) == 25 * 10**17

    async def test_exact_value_no_refund(self, market: Market) -> None:
        market.gateway.fund(BUYER, 100 * ETHER)
        result = await _engine(market, FundingMode.ATTACHED_VALUE).settle(
            None,
            CallContext(sender=BUYER, value=100 * ETHER, now=0),
            _trade(),
            market.ledger.config,
        )
        assert result.refund == 0
        assert market.gateway.held(BUYER) == 0

    async def test_short_value_rejected(self, market: Market) -> None:
        market.gateway.fund(BUYER, 100 * ETHER)
        with pytest.raises(InsufficientValueError):
            await _engine(market, FundingMode.ATTACHED_VALUE).settle(
                None,
                CallContext(sender=BUYER, value=99 * ETHER, now=0),
                _trade(),
                market.ledger.config,
            )

    async def test_zero_value_falls_back_to_balance(self, market: Market) -> None:
        market.fund_buyer_balance(100 * ETHER)
        result = await _engine(market, FundingMode.ATTACHED_VALUE).settle(
            None, CallContext(sender=BUYER, now=0), _trade(), market.ledger.config
        )
        assert result.funded_from_balance is True
        assert market.ledger.balances[BUYER] == 0


class TestTokenPayment:
    async def test_allowance_pulls_seller_amount_and_fee(self, market: Market) -> None:
        market.gateway.fund(BUYER, 100 * ETHER, TOKEN)
        market.gateway.allowances[(TOKEN, BUYER, MARKET)] = 100 * ETHER
        result = await _engine(market).settle(
            None, CallContext(sender=BUYER, now=0), _trade(currency=TOKEN), market.ledger.config
        )
        assert result.funded_from_balance is False
        assert market.gateway.held(SELLER, TOKEN) == 975 * 10**17
        assert market.gateway.held(MARKET, TOKEN) == 25 * 10**17
        assert market.ledger.fees[TOKEN] == 25 * 10**17
        assert market.gateway.allowances[(TOKEN, BUYER, MARKET)] == 0

    async def test_attached_value_rejected(self, market: Market) -> None:
        with pytest.raises(AttachedValueNotAcceptedError):
            await _engine(market, FundingMode.ATTACHED_VALUE).settle(
                None,
                CallContext(sender=BUYER, value=1, now=0),
                _trade(currency=TOKEN),
                market.ledger.config,
            )

    async def test_insufficient_allowance(self, market: Market) -> None:
        market.gateway.fund(BUYER, 100 * ETHER, TOKEN)
        market.gateway.allowances[(TOKEN, BUYER, MARKET)] = 50 * ETHER
        with pytest.raises(InsufficientAllowanceError):
            await _engine(market).settle(
                None,
                CallContext(sender=BUYER, now=0),
                _trade(currency=TOKEN),
                market.ledger.config,
            )
