# src/am_ledger/domain/invariants.py
"""Solvency invariant: the vault always covers what the ledger owes."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.errors import InvariantViolationError
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_ledger.domain.repository import MarketLedgerProtocol

logger = logging.getLogger(__name__)


async def verify_solvency(
    db: AsyncSession,
    ledger: MarketLedgerProtocol,
    gateway: ValueGatewayProtocol,
    currency: str,
) -> list[str]:
    """Compare vault holdings with ledger liabilities. Returns violation strings."""
    violations: list[str] = []
    liabilities = await ledger.total_liabilities(db, currency)
    held = await gateway.holdings(db, gateway.vault, currency)
    if held < liabilities:
        msg = (
            f"solvency violated for {currency}: "
            f"vault holds {held} < liabilities {liabilities}"
        )
        violations.append(msg)
        logger.error(msg)
    return violations


async def assert_solvent(
    db: AsyncSession,
    ledger: MarketLedgerProtocol,
    gateway: ValueGatewayProtocol,
    currency: str,
) -> None:
    violations = await verify_solvency(db, ledger, gateway, currency)
    if violations:
        raise InvariantViolationError("; ".join(violations))
