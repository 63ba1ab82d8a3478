"""Replay guard over the permanent used-nonce sets.

ORDER and OFFER are disjoint scopes. Entries are never expired or removed, so
once `check_and_consume` has returned True for a (scope, nonce), every later
call for the same pair returns False for the lifetime of the ledger.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.enums import NonceScope
from src.am_common.errors import AppError, OfferAlreadyUsedError, OrderAlreadyUsedError
from src.am_ledger.domain.repository import MarketLedgerProtocol

_REPLAY_ERRORS: dict[NonceScope, type[AppError]] = {
    NonceScope.ORDER: OrderAlreadyUsedError,
    NonceScope.OFFER: OfferAlreadyUsedError,
}


class ReplayGuard:
    def __init__(self, ledger: MarketLedgerProtocol) -> None:
        self._ledger = ledger

    async def is_used(self, db: AsyncSession, scope: NonceScope, nonce: str) -> bool:
        return await self._ledger.is_nonce_used(db, scope, nonce)

    async def ensure_unused(self, db: AsyncSession, scope: NonceScope, nonce: str) -> None:
        """Pure read. Raises the scope's replay error if `nonce` was consumed."""
        if await self._ledger.is_nonce_used(db, scope, nonce):
            raise _REPLAY_ERRORS[scope](nonce)

    async def check_and_consume(self, db: AsyncSession, scope: NonceScope, nonce: str) -> bool:
        """Mark `nonce` used. True on first use, False if it was already consumed."""
        return await self._ledger.mark_nonce_used(db, scope, nonce)

    async def consume(self, db: AsyncSession, scope: NonceScope, nonce: str) -> None:
        """check_and_consume that raises the scope's replay error instead of returning False."""
        if not await self.check_and_consume(db, scope, nonce):
            raise _REPLAY_ERRORS[scope](nonce)
