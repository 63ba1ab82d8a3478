"""Partner resolution for the fee split.

The partner of a trade is the asset's recorded creator. Creator lookup is best
effort: an asset contract that does not implement creator attribution, or any
failure while asking, means "no partner". It never aborts a settlement.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.address import ZERO_ADDRESS
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_registry.domain.registry import AssetRegistryProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartnerShare:
    partner: str
    rate: int       # bps of the total fee, 1..10000


async def lookup_creator(
    db: AsyncSession,
    registry: AssetRegistryProtocol,
    contract: str,
    token_id: int,
) -> str | None:
    """Creator of the asset, or None when absent or the lookup fails."""
    try:
        creator = await registry.creator_of(db, contract, token_id)
    except Exception as exc:  # noqa: BLE001 -- any failure means "no creator"
        logger.debug("creator_of(%s#%d) failed: %r", contract, token_id, exc)
        return None
    if not creator or creator == ZERO_ADDRESS:
        return None
    return creator


async def resolve_partner(
    db: AsyncSession,
    registry: AssetRegistryProtocol,
    ledger: MarketLedgerProtocol,
    contract: str,
    token_id: int,
) -> PartnerShare | None:
    """Creator with a non-zero fee share rate, else None (all fees to platform)."""
    creator = await lookup_creator(db, registry, contract, token_id)
    if creator is None:
        return None
    rate = await ledger.get_partner_fee_rate(db, creator)
    if rate == 0:
        return None
    return PartnerShare(partner=creator, rate=rate)
