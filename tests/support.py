"""Keys, addresses and a fully wired in-memory market shared by the unit tests."""

from dataclasses import dataclass, replace

from src.am_common.address import NATIVE_CURRENCY, to_nonce
from src.am_common.enums import FundingMode, Role
from src.am_common.reentrancy import ReentrancyGuard
from src.am_registry.domain.proofs import OracleProofVerifier
from src.am_registry.domain.registry import AssetRegistry
from src.am_settlement.domain.engine import SettlementEngine
from src.am_settlement.domain.models import Offer, Order
from src.am_settlement.domain.payment import PaymentEngine
from src.am_settlement.domain.replay import ReplayGuard
from src.am_settlement.domain.validation import ValidationPipeline
from src.am_signing.domain.digest import SigningDomain
from src.am_signing.domain.verifier import SignatureVerifier
from tests.fakes import (
    MARKET,
    REGISTRY,
    FakeAssetRepository,
    FakeMarketLedger,
    FakeSession,
    FakeValueGateway,
    address_of,
    make_config,
    make_gate,
    sign_digest,
)

ADMIN_KEY = bytes([1]) * 32
SELLER_KEY = bytes([2]) * 32
BUYER_KEY = bytes([3]) * 32
ORACLE_KEY = bytes([4]) * 32
STRANGER_KEY = bytes([5]) * 32

ADMIN = address_of(ADMIN_KEY)
SELLER = address_of(SELLER_KEY)
BUYER = address_of(BUYER_KEY)
ORACLE = address_of(ORACLE_KEY)
STRANGER = address_of(STRANGER_KEY)

NOW = 1_700_000_000
FAR_FUTURE = NOW + 86_400
ETHER = 10**18

TEST_DOMAIN = SigningDomain(
    name="AgentMarket", version="1.0.0", chain_id=16600, verifying_contract=MARKET
)


@dataclass
class Market:
    """A fully wired market over in-memory fakes."""

    ledger: FakeMarketLedger
    gateway: FakeValueGateway
    assets: FakeAssetRepository
    session: FakeSession
    registry: AssetRegistry
    verifier: SignatureVerifier
    replay: ReplayGuard
    guard: ReentrancyGuard
    engine: SettlementEngine

    def sign_order(self, order: Order, key: bytes = SELLER_KEY) -> Order:
        return replace(order, signature=sign_digest(key, self.verifier.order_digest(order)))

    def sign_offer(self, offer: Offer, key: bytes = BUYER_KEY) -> Offer:
        return replace(offer, signature=sign_digest(key, self.verifier.offer_digest(offer)))

    def order(self, key: bytes = SELLER_KEY, **fields: object) -> Order:
        values: dict[str, object] = {
            "token_id": 1,
            "min_price": 100 * ETHER,
            "expire_time": FAR_FUTURE,
            "nonce": to_nonce(1),
            "signature": b"",
        }
        values.update(fields)
        return self.sign_order(Order(**values), key)  # type: ignore[arg-type]

    def offer(self, key: bytes = BUYER_KEY, **fields: object) -> Offer:
        values: dict[str, object] = {
            "token_id": 1,
            "price": 100 * ETHER,
            "expire_time": FAR_FUTURE,
            "nonce": to_nonce(1),
            "signature": b"",
        }
        values.update(fields)
        return self.sign_offer(Offer(**values), key)  # type: ignore[arg-type]

    def fund_buyer_balance(self, amount: int, buyer: str = BUYER) -> None:
        """Deposit-equivalent: ledger balance plus matching vault holdings."""
        self.ledger.balances[buyer] = self.ledger.balances.get(buyer, 0) + amount
        self.gateway.fund(MARKET, amount, NATIVE_CURRENCY)


def build_market(funding_mode: FundingMode = FundingMode.BALANCE_ONLY) -> Market:
    ledger = FakeMarketLedger()
    ledger.config = make_config(admin=ADMIN, fee_rate=250)
    for role in (Role.ADMIN, Role.PAUSER, Role.OPERATOR):
        ledger.roles.add((role, ADMIN))
    gateway = FakeValueGateway(MARKET)
    assets = FakeAssetRepository()
    assets.put(REGISTRY, 1, SELLER, approved=MARKET)
    registry = AssetRegistry(assets, OracleProofVerifier(ORACLE), ledger)
    verifier = SignatureVerifier(TEST_DOMAIN)
    replay = ReplayGuard(ledger)
    guard = ReentrancyGuard("test")
    gate = make_gate(ledger)
    engine = SettlementEngine(
        gate=gate,
        ledger=ledger,
        registry=registry,
        gateway=gateway,
        validation=ValidationPipeline(verifier, ledger, registry, replay),
        payment=PaymentEngine(ledger, gateway, registry, funding_mode),
        replay=replay,
        guard=guard,
    )
    return Market(
        ledger=ledger,
        gateway=gateway,
        assets=assets,
        session=FakeSession(ledger, gateway, assets),
        registry=registry,
        verifier=verifier,
        replay=replay,
        guard=guard,
        engine=engine,
    )
