"""AdminApplicationService — thin composition layer over MarketAdministration.

Mutations commit on success and roll back on any exception. Reads run without
an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_admin.application.schemas import (
    EventItem,
    EventListResponse,
    MarketConfigResponse,
    PartnerFeeRateResponse,
    RoleResponse,
    WhitelistResponse,
    cursor_decode,
    cursor_encode,
)
from src.am_admin.domain.gate import AccessGate
from src.am_admin.domain.lifecycle import MarketAdministration
from src.am_common.address import to_address, to_nonzero_address
from src.am_common.context import CallContext
from src.am_common.enums import Role
from src.am_ledger.domain.models import MarketConfig
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_ledger.infrastructure.persistence import MarketLedgerRepository

logger = logging.getLogger(__name__)


def default_access_gate(ledger: MarketLedgerProtocol | None = None) -> AccessGate:
    return AccessGate(ledger or MarketLedgerRepository(), settings.PAUSE_GUARDED_OPERATIONS)


class AdminApplicationService:
    def __init__(
        self,
        ledger: MarketLedgerProtocol | None = None,
        gate: AccessGate | None = None,
    ) -> None:
        self._ledger: MarketLedgerProtocol = ledger or MarketLedgerRepository()
        self._gate = gate or default_access_gate(self._ledger)
        self._admin = MarketAdministration(self._ledger, self._gate)

    async def bootstrap(self, db: AsyncSession) -> MarketConfig | None:
        """Initialize the ledger from settings when INITIAL_ADMIN is set and no config exists."""
        if settings.INITIAL_ADMIN is None:
            return None
        if await self._ledger.get_config(db) is not None:
            return None
        try:
            config = await self._admin.initialize(
                db,
                admin=to_nonzero_address(settings.INITIAL_ADMIN, "INITIAL_ADMIN"),
                fee_rate=settings.INITIAL_FEE_RATE,
                asset_registry=to_nonzero_address(
                    settings.ASSET_REGISTRY_ADDRESS, "ASSET_REGISTRY_ADDRESS"
                ),
                mint_fee=settings.MINT_FEE,
                discount_mint_fee=settings.DISCOUNT_MINT_FEE,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Market ledger bootstrapped from settings")
        return config

    async def get_config(self, db: AsyncSession) -> MarketConfigResponse:
        return MarketConfigResponse.from_config(await self._gate.load_config(db))

    async def is_whitelisted(self, db: AsyncSession, contract: str) -> WhitelistResponse:
        contract = to_address(contract, "contract")
        whitelisted = await self._admin.is_whitelisted(db, contract)
        return WhitelistResponse(contract=contract, whitelisted=whitelisted)

    async def set_fee_rate(
        self, db: AsyncSession, ctx: CallContext, rate: int
    ) -> MarketConfigResponse:
        try:
            config = await self._admin.set_fee_rate(db, ctx, rate)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarketConfigResponse.from_config(config)

    async def set_mint_fees(
        self, db: AsyncSession, ctx: CallContext, mint_fee: int, discount_mint_fee: int
    ) -> MarketConfigResponse:
        try:
            config = await self._admin.set_mint_fees(db, ctx, mint_fee, discount_mint_fee)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarketConfigResponse.from_config(config)

    async def set_asset_registry(
        self, db: AsyncSession, ctx: CallContext, registry: str
    ) -> MarketConfigResponse:
        try:
            config = await self._admin.set_asset_registry(
                db, ctx, to_address(registry, "asset_registry")
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarketConfigResponse.from_config(config)

    async def set_partner_fee_rate(
        self, db: AsyncSession, ctx: CallContext, partner: str, rate: int
    ) -> PartnerFeeRateResponse:
        partner = to_address(partner, "partner")
        try:
            old_rate = await self._admin.set_partner_fee_rate(db, ctx, partner, rate)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PartnerFeeRateResponse(partner=partner, old_rate=old_rate, new_rate=rate)

    async def add_whitelisted(
        self, db: AsyncSession, ctx: CallContext, contract: str
    ) -> WhitelistResponse:
        contract = to_address(contract, "contract")
        try:
            added = await self._admin.add_whitelisted(db, ctx, contract)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WhitelistResponse(contract=contract, whitelisted=True, changed=added)

    async def remove_whitelisted(
        self, db: AsyncSession, ctx: CallContext, contract: str
    ) -> WhitelistResponse:
        contract = to_address(contract, "contract")
        try:
            removed = await self._admin.remove_whitelisted(db, ctx, contract)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WhitelistResponse(contract=contract, whitelisted=False, changed=removed)

    async def grant_role(
        self, db: AsyncSession, ctx: CallContext, role: Role, account: str
    ) -> RoleResponse:
        account = to_address(account, "account")
        try:
            granted = await self._admin.grant_role(db, ctx, role, account)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return RoleResponse(role=role, account=account, changed=granted)

    async def revoke_role(
        self, db: AsyncSession, ctx: CallContext, role: Role, account: str
    ) -> RoleResponse:
        account = to_address(account, "account")
        try:
            revoked = await self._admin.revoke_role(db, ctx, role, account)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return RoleResponse(role=role, account=account, changed=revoked)

    async def transfer_admin(
        self, db: AsyncSession, ctx: CallContext, new_admin: str
    ) -> MarketConfigResponse:
        try:
            config = await self._admin.transfer_admin(
                db, ctx, to_address(new_admin, "new_admin")
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarketConfigResponse.from_config(config)

    async def pause(self, db: AsyncSession, ctx: CallContext) -> MarketConfigResponse:
        try:
            config = await self._admin.pause(db, ctx)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarketConfigResponse.from_config(config)

    async def unpause(self, db: AsyncSession, ctx: CallContext) -> MarketConfigResponse:
        try:
            config = await self._admin.unpause(db, ctx)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarketConfigResponse.from_config(config)

    async def list_events(
        self,
        db: AsyncSession,
        event_type: str | None,
        cursor: str | None,
        limit: int,
    ) -> EventListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        events = await self._ledger.list_events(db, event_type, cursor_id, limit + 1)
        has_more = len(events) > limit
        page = events[:limit]
        items = [
            EventItem(
                id=e.id,
                event_type=e.event_type,
                payload=e.payload,
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return EventListResponse(items=items, next_cursor=next_cursor, has_more=has_more)
