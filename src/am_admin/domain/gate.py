"""AccessGate — role and pause checks shared by every mutating entry point."""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.domain.policy import OPERATION_ROLES
from src.am_common.enums import Operation, Role
from src.am_common.errors import MarketNotInitializedError, MarketPausedError, MissingRoleError
from src.am_ledger.domain.models import MarketConfig
from src.am_ledger.domain.repository import MarketLedgerProtocol

logger = logging.getLogger(__name__)


class AccessGate:
    def __init__(
        self,
        ledger: MarketLedgerProtocol,
        pause_guarded: Iterable[Operation],
    ) -> None:
        self._ledger = ledger
        self._pause_guarded = frozenset(pause_guarded)

    def is_pause_guarded(self, operation: Operation) -> bool:
        return operation in self._pause_guarded

    async def load_config(self, db: AsyncSession) -> MarketConfig:
        config = await self._ledger.get_config(db)
        if config is None:
            raise MarketNotInitializedError()
        return config

    async def has_role(self, db: AsyncSession, role: Role, account: str) -> bool:
        return await self._ledger.has_role(db, role, account)

    async def require(self, db: AsyncSession, operation: Operation, account: str) -> None:
        """Raise MissingRoleError if `account` lacks the role `operation` needs."""
        role = OPERATION_ROLES[operation]
        if role is None:
            return
        if not await self._ledger.has_role(db, role, account):
            logger.info("Denied %s for %s: missing %s", operation.value, account, role.value)
            raise MissingRoleError(account, role.value)

    def ensure_not_paused(self, config: MarketConfig, operation: Operation) -> None:
        if config.paused and operation in self._pause_guarded:
            raise MarketPausedError()

    async def enter(self, db: AsyncSession, operation: Operation, account: str) -> MarketConfig:
        """Full entry check: initialized, role held, not paused. Returns the config row."""
        config = await self.load_config(db)
        await self.require(db, operation, account)
        self.ensure_not_paused(config, operation)
        return config
