"""SettlementApplicationService — thin composition layer over SettlementEngine.

fulfill commits on success and rolls back on any exception. The engine's own
savepoint already undid its writes; the rollback here ends the transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_admin.application.service import default_access_gate
from src.am_admin.domain.gate import AccessGate
from src.am_common.address import to_address
from src.am_common.context import CallContext
from src.am_common.enums import NonceScope
from src.am_common.reentrancy import ReentrancyGuard, get_reentrancy_guard
from src.am_custody.domain.gateway import ValueGatewayProtocol
from src.am_custody.infrastructure.persistence import default_value_gateway
from src.am_ledger.domain.repository import MarketLedgerProtocol
from src.am_ledger.infrastructure.persistence import MarketLedgerRepository
from src.am_registry.application.service import default_asset_registry
from src.am_registry.domain.registry import AssetRegistryProtocol
from src.am_settlement.application.schemas import (
    FulfillRequest,
    FulfillResponse,
    NonceStatusResponse,
    parse_nonce_param,
)
from src.am_settlement.domain.engine import SettlementEngine
from src.am_settlement.domain.payment import PaymentEngine
from src.am_settlement.domain.replay import ReplayGuard
from src.am_settlement.domain.validation import ValidationPipeline
from src.am_signing.domain.digest import SigningDomain
from src.am_signing.domain.verifier import SignatureVerifier


def default_signature_verifier() -> SignatureVerifier:
    return SignatureVerifier(
        SigningDomain(
            name=settings.EIP712_NAME,
            version=settings.EIP712_VERSION,
            chain_id=settings.CHAIN_ID,
            verifying_contract=to_address(settings.MARKET_ADDRESS, "MARKET_ADDRESS"),
        )
    )


def build_settlement_engine(
    ledger: MarketLedgerProtocol,
    registry: AssetRegistryProtocol,
    gateway: ValueGatewayProtocol,
    gate: AccessGate,
    verifier: SignatureVerifier,
    guard: ReentrancyGuard,
) -> SettlementEngine:
    replay = ReplayGuard(ledger)
    return SettlementEngine(
        gate=gate,
        ledger=ledger,
        registry=registry,
        gateway=gateway,
        validation=ValidationPipeline(verifier, ledger, registry, replay),
        payment=PaymentEngine(ledger, gateway, registry, settings.FUNDING_MODE),
        replay=replay,
        guard=guard,
    )


class SettlementApplicationService:
    def __init__(
        self,
        ledger: MarketLedgerProtocol | None = None,
        engine: SettlementEngine | None = None,
    ) -> None:
        self._ledger: MarketLedgerProtocol = ledger or MarketLedgerRepository()
        self._replay = ReplayGuard(self._ledger)
        self._engine = engine or build_settlement_engine(
            ledger=self._ledger,
            registry=default_asset_registry(self._ledger),
            gateway=default_value_gateway(),
            gate=default_access_gate(self._ledger),
            verifier=default_signature_verifier(),
            guard=get_reentrancy_guard(),
        )

    async def fulfill(
        self, db: AsyncSession, sender: str, body: FulfillRequest
    ) -> FulfillResponse:
        ctx = CallContext(sender=sender, value=body.value)
        order = body.order.to_domain()
        offer = body.offer.to_domain()
        proofs = [p.to_domain() for p in body.proofs]
        try:
            result = await self._engine.fulfill(db, ctx, order, offer, proofs)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return FulfillResponse.from_result(result)

    async def nonce_status(
        self, db: AsyncSession, scope: NonceScope, nonce: str
    ) -> NonceStatusResponse:
        canonical = parse_nonce_param(nonce)
        used = await self._replay.is_used(db, scope, canonical)
        return NonceStatusResponse(scope=scope, nonce=canonical, used=used)
