"""Unit tests for platform and partner fee withdrawals."""

import pytest
from eth_utils import to_checksum_address

from src.am_common.address import NATIVE_CURRENCY
from src.am_common.context import CallContext
from src.am_common.enums import EventType
from src.am_common.errors import (
    MissingRoleError,
    NothingToWithdrawError,
    ValueTransferFailedError,
)
from src.am_common.reentrancy import ReentrancyGuard
from src.am_fees.domain.withdrawals import FeeWithdrawals
from tests.fakes import MARKET, make_gate
from tests.support import ADMIN, ETHER, STRANGER, Market

TOKEN = to_checksum_address("0x00000000000000000000000000000000000070c3")


def _withdrawals(market: Market) -> FeeWithdrawals:
    return FeeWithdrawals(
        market.ledger, market.gateway, make_gate(market.ledger), ReentrancyGuard("fees")
    )


class TestWithdrawFees:
    async def test_admin_takes_whole_native_pool(self, market: Market) -> None:
        market.ledger.fees[NATIVE_CURRENCY] = 3 * ETHER
        market.gateway.fund(MARKET, 3 * ETHER)

        amount = await _withdrawals(market).withdraw_fees(
            market.session, CallContext(sender=ADMIN), NATIVE_CURRENCY
        )

        assert amount == 3 * ETHER
        assert market.ledger.fees.get(NATIVE_CURRENCY, 0) == 0
        assert market.gateway.held(ADMIN) == 3 * ETHER
        assert market.ledger.event_types()[-1] == EventType.FEES_WITHDRAWN.value

    async def test_token_pool_paid_in_token(self, market: Market) -> None:
        market.ledger.fees[TOKEN] = 5
        market.gateway.fund(MARKET, 5, TOKEN)
        await _withdrawals(market).withdraw_fees(market.session, CallContext(sender=ADMIN), TOKEN)
        assert market.gateway.held(ADMIN, TOKEN) == 5

    async def test_non_admin_rejected(self, market: Market) -> None:
        market.ledger.fees[NATIVE_CURRENCY] = 1
        market.gateway.fund(MARKET, 1)
        with pytest.raises(MissingRoleError):
            await _withdrawals(market).withdraw_fees(
                market.session, CallContext(sender=STRANGER), NATIVE_CURRENCY
            )
        assert market.ledger.fees[NATIVE_CURRENCY] == 1

    async def test_empty_pool(self, market: Market) -> None:
        with pytest.raises(NothingToWithdrawError):
            await _withdrawals(market).withdraw_fees(
                market.session, CallContext(sender=ADMIN), NATIVE_CURRENCY
            )


class TestWithdrawPartnerFees:
    async def test_partner_takes_own_pool(self, market: Market) -> None:
        market.ledger.partner_fees[(STRANGER, NATIVE_CURRENCY)] = ETHER
        market.gateway.fund(MARKET, ETHER)

        amount = await _withdrawals(market).withdraw_partner_fees(
            market.session, CallContext(sender=STRANGER), NATIVE_CURRENCY
        )

        assert amount == ETHER
        assert market.gateway.held(STRANGER) == ETHER
        assert (STRANGER, NATIVE_CURRENCY) not in market.ledger.partner_fees
        assert market.ledger.event_types()[-1] == EventType.PARTNER_FEES_WITHDRAWN.value

    async def test_second_withdrawal_is_empty(self, market: Market) -> None:
        market.ledger.partner_fees[(STRANGER, NATIVE_CURRENCY)] = ETHER
        market.gateway.fund(MARKET, ETHER)
        withdrawals = _withdrawals(market)
        await withdrawals.withdraw_partner_fees(
            market.session, CallContext(sender=STRANGER), NATIVE_CURRENCY
        )
        with pytest.raises(NothingToWithdrawError):
            await withdrawals.withdraw_partner_fees(
                market.session, CallContext(sender=STRANGER), NATIVE_CURRENCY
            )

    async def test_failed_payout_keeps_pool(self, market: Market) -> None:
        market.ledger.partner_fees[(STRANGER, NATIVE_CURRENCY)] = ETHER
        market.gateway.fund(MARKET, ETHER)
        market.gateway.fail_sends_to.add(STRANGER)
        with pytest.raises(ValueTransferFailedError):
            await _withdrawals(market).withdraw_partner_fees(
                market.session, CallContext(sender=STRANGER), NATIVE_CURRENCY
            )
        assert market.ledger.partner_fees[(STRANGER, NATIVE_CURRENCY)] == ETHER
        assert market.gateway.held(MARKET) == ETHER
