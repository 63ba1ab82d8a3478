"""Market mint flow: charge the mint fee from the caller's deposited balance, then mint.

DISCOUNTED_MINTER holders pay `discount_mint_fee`, everyone else `mint_fee`.
The fee is credited to the native platform pool. Assets are always minted on
the platform registry.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.domain.gate import AccessGate
from src.am_common.address import NATIVE_CURRENCY, ZERO_ADDRESS
from src.am_common.context import CallContext
from src.am_common.enums import Operation, Role
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_ledger.domain.invariants import assert_solvent
from src.am_ledger.domain.models import MarketConfig
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_registry.domain.models import Asset, IntelligentData
from src.am_registry.domain.registry import AssetRegistry

logger = logging.getLogger(__name__)


class MintFlow:
    def __init__(
        self,
        ledger: MarketLedgerProtocol,
        gateway: ValueGatewayProtocol,
        gate: AccessGate,
        registry: AssetRegistry,
    ) -> None:
        self._ledger = ledger
        self._gateway = gateway
        self._gate = gate
        self._registry = registry

    async def fee_for(self, db: AsyncSession, config: MarketConfig, account: str) -> int:
        if await self._gate.has_role(db, Role.DISCOUNTED_MINTER, account):
            return config.discount_mint_fee
        return config.mint_fee

    async def mint(
        self,
        db: AsyncSession,
        ctx: CallContext,
        to: str,
        uri: str = "",
        creator: str = ZERO_ADDRESS,
        data: list[IntelligentData] | None = None,
    ) -> Asset:
        config = await self._gate.enter(db, Operation.MINT, ctx.sender)
        fee = await self.fee_for(db, config, ctx.sender)

        async with db.begin_nested():
            if fee:
                await self._ledger.debit_balance(db, ctx.sender, fee)
                await self._ledger.credit_fee(db, NATIVE_CURRENCY, fee)
            asset = await self._registry.mint_with_role(
                db, config.asset_registry, to, uri=uri, creator=creator, data=data, fee=fee
            )
            await assert_solvent(db, self._ledger, self._gateway, NATIVE_CURRENCY)
        logger.info("Mint by %s: token %d, fee %d", ctx.sender, asset.token_id, fee)
        return asset
