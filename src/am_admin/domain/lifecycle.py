"""Market lifecycle and configuration: initialization, role-gated setters, pause.

Every setter goes through AccessGate.enter, so the role required is whatever
OPERATION_ROLES says, and each successful change appends one ledger event.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.domain.gate import AccessGate
from src.am_admin.domain.policy import ADMIN_ROLE_BUNDLE
from src.am_common.address import ZERO_ADDRESS
from src.am_common.context import CallContext
from src.am_common.enums import EventType, Operation, Role
from src.am_common.errors import (
    FeeRateTooHighError,
    InvalidAddressError,
    InvalidAmountError,
    MarketAlreadyInitializedError,
    MarketNotPausedError,
    MarketPausedError,
    PartnerFeeRateTooHighError,
    ProtectedRegistryError,
)
from src.am_ledger.domain.models import MAX_FEE_RATE, MAX_PARTNER_FEE_RATE, MarketConfig
from src.am_ledger.domain.repository import MarketLedgerProtocol

logger = logging.getLogger(__name__)


def _check_fee_rate(rate: int) -> None:
    if not 0 <= rate <= MAX_FEE_RATE:
        raise FeeRateTooHighError(rate, MAX_FEE_RATE)


def _check_nonzero(address: str, field: str) -> None:
    if address == ZERO_ADDRESS:
        raise InvalidAddressError(field, address)


class MarketAdministration:
    def __init__(self, ledger: MarketLedgerProtocol, gate: AccessGate) -> None:
        self._ledger = ledger
        self._gate = gate

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def initialize(
        self,
        db: AsyncSession,
        admin: str,
        fee_rate: int,
        asset_registry: str,
        mint_fee: int = 0,
        discount_mint_fee: int = 0,
    ) -> MarketConfig:
        """Create the ledger's config row once and grant the admin role bundle."""
        if await self._ledger.get_config(db) is not None:
            raise MarketAlreadyInitializedError()
        _check_nonzero(admin, "admin")
        _check_nonzero(asset_registry, "asset_registry")
        _check_fee_rate(fee_rate)
        if mint_fee < 0 or discount_mint_fee < 0:
            raise InvalidAmountError(min(mint_fee, discount_mint_fee))

        config = await self._ledger.create_config(
            db,
            MarketConfig(
                admin=admin,
                fee_rate=fee_rate,
                mint_fee=mint_fee,
                discount_mint_fee=discount_mint_fee,
                asset_registry=asset_registry,
            ),
        )
        for role in ADMIN_ROLE_BUNDLE:
            await self._ledger.grant_role(db, role, admin)
        await self._ledger.record_event(
            db,
            EventType.MARKET_INITIALIZED.value,
            {
                "admin": admin,
                "fee_rate": fee_rate,
                "asset_registry": asset_registry,
                "mint_fee": str(mint_fee),
                "discount_mint_fee": str(discount_mint_fee),
                "schema_version": config.schema_version,
            },
        )
        logger.info("Market initialized: admin=%s fee_rate=%d", admin, fee_rate)
        return config

    # ------------------------------------------------------------------
    # Fee configuration
    # ------------------------------------------------------------------

    async def set_fee_rate(self, db: AsyncSession, ctx: CallContext, rate: int) -> MarketConfig:
        config = await self._gate.enter(db, Operation.SET_FEE_RATE, ctx.sender)
        _check_fee_rate(rate)
        updated = await self._ledger.save_config(db, config.with_changes(fee_rate=rate))
        await self._ledger.record_event(
            db,
            EventType.FEE_RATE_UPDATED.value,
            {"old_rate": config.fee_rate, "new_rate": rate},
        )
        logger.info("Fee rate %d -> %d by %s", config.fee_rate, rate, ctx.sender)
        return updated

    async def set_mint_fees(
        self, db: AsyncSession, ctx: CallContext, mint_fee: int, discount_mint_fee: int
    ) -> MarketConfig:
        config = await self._gate.enter(db, Operation.SET_MINT_FEES, ctx.sender)
        if mint_fee < 0 or discount_mint_fee < 0:
            raise InvalidAmountError(min(mint_fee, discount_mint_fee))
        updated = await self._ledger.save_config(
            db, config.with_changes(mint_fee=mint_fee, discount_mint_fee=discount_mint_fee)
        )
        await self._ledger.record_event(
            db,
            EventType.MINT_FEES_UPDATED.value,
            {"mint_fee": str(mint_fee), "discount_mint_fee": str(discount_mint_fee)},
        )
        return updated

    async def set_partner_fee_rate(
        self, db: AsyncSession, ctx: CallContext, partner: str, rate: int
    ) -> int:
        """Set the share of each trade fee paid to `partner`. Returns the old rate."""
        await self._gate.enter(db, Operation.SET_PARTNER_FEE_RATE, ctx.sender)
        _check_nonzero(partner, "partner")
        if not 0 <= rate <= MAX_PARTNER_FEE_RATE:
            raise PartnerFeeRateTooHighError(rate)
        old_rate = await self._ledger.get_partner_fee_rate(db, partner)
        await self._ledger.set_partner_fee_rate(db, partner, rate)
        await self._ledger.record_event(
            db,
            EventType.PARTNER_FEE_RATE_UPDATED.value,
            {"partner": partner, "old_rate": old_rate, "new_rate": rate},
        )
        logger.info("Partner %s fee rate %d -> %d", partner, old_rate, rate)
        return old_rate

    # ------------------------------------------------------------------
    # Asset contracts
    # ------------------------------------------------------------------

    async def set_asset_registry(
        self, db: AsyncSession, ctx: CallContext, registry: str
    ) -> MarketConfig:
        config = await self._gate.enter(db, Operation.SET_ASSET_REGISTRY, ctx.sender)
        _check_nonzero(registry, "asset_registry")
        updated = await self._ledger.save_config(db, config.with_changes(asset_registry=registry))
        await self._ledger.record_event(
            db,
            EventType.ASSET_REGISTRY_UPDATED.value,
            {"old_registry": config.asset_registry, "new_registry": registry},
        )
        return updated

    async def is_whitelisted(self, db: AsyncSession, contract: str) -> bool:
        config = await self._gate.load_config(db)
        if contract == config.asset_registry:
            return True
        return await self._ledger.is_whitelisted(db, contract)

    async def add_whitelisted(self, db: AsyncSession, ctx: CallContext, contract: str) -> bool:
        await self._gate.enter(db, Operation.UPDATE_WHITELIST, ctx.sender)
        _check_nonzero(contract, "contract")
        added = await self._ledger.add_whitelisted(db, contract)
        if added:
            await self._ledger.record_event(
                db, EventType.CONTRACT_WHITELISTED.value, {"contract": contract}
            )
        return added

    async def remove_whitelisted(
        self, db: AsyncSession, ctx: CallContext, contract: str
    ) -> bool:
        config = await self._gate.enter(db, Operation.UPDATE_WHITELIST, ctx.sender)
        _check_nonzero(contract, "contract")
        if contract == config.asset_registry:
            raise ProtectedRegistryError(contract)
        removed = await self._ledger.remove_whitelisted(db, contract)
        if removed:
            await self._ledger.record_event(
                db, EventType.CONTRACT_UNWHITELISTED.value, {"contract": contract}
            )
        return removed

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def grant_role(
        self, db: AsyncSession, ctx: CallContext, role: Role, account: str
    ) -> bool:
        await self._gate.enter(db, Operation.MANAGE_ROLES, ctx.sender)
        _check_nonzero(account, "account")
        granted = await self._ledger.grant_role(db, role, account)
        if granted:
            await self._ledger.record_event(
                db,
                EventType.ROLE_GRANTED.value,
                {"role": role.value, "account": account, "by": ctx.sender},
            )
        return granted

    async def revoke_role(
        self, db: AsyncSession, ctx: CallContext, role: Role, account: str
    ) -> bool:
        await self._gate.enter(db, Operation.MANAGE_ROLES, ctx.sender)
        revoked = await self._ledger.revoke_role(db, role, account)
        if revoked:
            await self._ledger.record_event(
                db,
                EventType.ROLE_REVOKED.value,
                {"role": role.value, "account": account, "by": ctx.sender},
            )
        return revoked

    async def transfer_admin(
        self, db: AsyncSession, ctx: CallContext, new_admin: str
    ) -> MarketConfig:
        """Move ADMIN, PAUSER and OPERATOR from the caller to `new_admin` in one step."""
        config = await self._gate.enter(db, Operation.TRANSFER_ADMIN, ctx.sender)
        _check_nonzero(new_admin, "new_admin")
        old_admin = ctx.sender
        if new_admin != old_admin:
            for role in ADMIN_ROLE_BUNDLE:
                await self._ledger.grant_role(db, role, new_admin)
                await self._ledger.revoke_role(db, role, old_admin)
        updated = await self._ledger.save_config(db, config.with_changes(admin=new_admin))
        await self._ledger.record_event(
            db,
            EventType.ADMIN_CHANGED.value,
            {"old_admin": old_admin, "new_admin": new_admin},
        )
        logger.info("Admin transferred %s -> %s", old_admin, new_admin)
        return updated

    # ------------------------------------------------------------------
    # Pause
    # ------------------------------------------------------------------

    async def pause(self, db: AsyncSession, ctx: CallContext) -> MarketConfig:
        config = await self._gate.load_config(db)
        await self._gate.require(db, Operation.PAUSE, ctx.sender)
        if config.paused:
            raise MarketPausedError()
        updated = await self._ledger.save_config(db, config.with_changes(paused=True))
        await self._ledger.record_event(db, EventType.PAUSED.value, {"by": ctx.sender})
        logger.info("Market paused by %s", ctx.sender)
        return updated

    async def unpause(self, db: AsyncSession, ctx: CallContext) -> MarketConfig:
        config = await self._gate.load_config(db)
        await self._gate.require(db, Operation.PAUSE, ctx.sender)
        if not config.paused:
            raise MarketNotPausedError()
        updated = await self._ledger.save_config(db, config.with_changes(paused=False))
        await self._ledger.record_event(db, EventType.UNPAUSED.value, {"by": ctx.sender})
        logger.info("Market unpaused by %s", ctx.sender)
        return updated
