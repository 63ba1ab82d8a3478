"""RegistryApplicationService — mint, approve, creator attribution, asset lookup."""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_admin.application.service import default_access_gate
from src.am_admin.domain.gate import AccessGate
from src.am_common.address import ZERO_ADDRESS, to_address, to_optional_address
from src.am_common.context import CallContext
from src.am_common.enums import Operation
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_custody.infrastructure.persistence import default_value_gateway
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_ledger.infrastructure.persistence import MarketLedgerRepository
from src.am_registry.application.schemas import (
    ApproveAssetRequest,
    AssetResponse,
    MintRequest,
    MintWithRoleRequest,
    SetCreatorRequest,
)
from src.am_registry.domain.mint import MintFlow
from src.am_registry.domain.proofs import OracleProofVerifier
from src.am_registry.domain.registry import AssetRegistry
from src.am_registry.infrastructure.persistence import AssetRepository


def default_asset_registry(ledger: MarketLedgerProtocol | None = None) -> AssetRegistry:
    return AssetRegistry(
        AssetRepository(),
        OracleProofVerifier(to_address(settings.PROOF_ORACLE_ADDRESS, "PROOF_ORACLE_ADDRESS")),
        ledger or MarketLedgerRepository(),
    )


class RegistryApplicationService:
    def __init__(
        self,
        ledger: MarketLedgerProtocol | None = None,
        gateway: ValueGatewayProtocol | None = None,
        gate: AccessGate | None = None,
        registry: AssetRegistry | None = None,
    ) -> None:
        self._ledger: MarketLedgerProtocol = ledger or MarketLedgerRepository()
        self._gateway: ValueGatewayProtocol = gateway or default_value_gateway()
        self._gate = gate or default_access_gate(self._ledger)
        self._registry = registry or default_asset_registry(self._ledger)
        self._mint = MintFlow(self._ledger, self._gateway, self._gate, self._registry)

    async def _contract(self, db: AsyncSession, contract: str | None) -> str:
        resolved = to_optional_address(contract, "contract")
        if resolved == ZERO_ADDRESS:
            return (await self._gate.load_config(db)).asset_registry
        return resolved

    async def get_asset(self, db: AsyncSession, contract: str, token_id: int) -> AssetResponse:
        asset = await self._registry.get_asset(db, to_address(contract, "contract"), token_id)
        return AssetResponse.from_asset(asset)

    async def mint(self, db: AsyncSession, ctx: CallContext, body: MintRequest) -> AssetResponse:
        try:
            asset = await self._mint.mint(
                db,
                ctx,
                to=to_address(body.to, "to"),
                uri=body.uri,
                creator=to_optional_address(body.creator, "creator"),
                data=[d.to_domain() for d in body.data],
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AssetResponse.from_asset(asset)

    async def mint_with_role(
        self, db: AsyncSession, ctx: CallContext, body: MintWithRoleRequest
    ) -> AssetResponse:
        try:
            await self._gate.require(db, Operation.MINT_WITH_ROLE, ctx.sender)
            asset = await self._registry.mint_with_role(
                db,
                await self._contract(db, body.contract),
                to_address(body.to, "to"),
                uri=body.uri,
                creator=to_optional_address(body.creator, "creator"),
                data=[d.to_domain() for d in body.data],
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AssetResponse.from_asset(asset)

    async def approve(
        self, db: AsyncSession, ctx: CallContext, body: ApproveAssetRequest
    ) -> AssetResponse:
        try:
            contract = await self._contract(db, body.contract)
            operator = (
                to_address(body.operator, "operator") if body.operator else self._gateway.vault
            )
            await self._registry.approve(db, contract, ctx.sender, operator, body.token_id)
            asset = await self._registry.get_asset(db, contract, body.token_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AssetResponse.from_asset(asset)

    async def set_creator(
        self, db: AsyncSession, ctx: CallContext, body: SetCreatorRequest
    ) -> AssetResponse:
        try:
            await self._gate.require(db, Operation.SET_CREATOR, ctx.sender)
            contract = await self._contract(db, body.contract)
            await self._registry.set_creator(
                db, contract, body.token_id, to_address(body.creator, "creator")
            )
            asset = await self._registry.get_asset(db, contract, body.token_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AssetResponse.from_asset(asset)
