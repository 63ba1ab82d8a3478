"""Domain models for am_settlement — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.am_common.address import NATIVE_CURRENCY, ZERO_ADDRESS
from src.am_common.enums import SignatureScheme


@dataclass(frozen=True)
class Order:
    """Seller's signed listing of one asset at a minimum price."""
    token_id: int
    min_price: int                       # wei / token units
    expire_time: int                     # unix seconds
    nonce: str                           # canonical bytes32 hex
    signature: bytes                     # 65 bytes r || s || v
    currency: str = NATIVE_CURRENCY
    receiver: str = ZERO_ADDRESS         # zero = anyone may buy
    asset_contract: str = ZERO_ADDRESS   # zero = platform registry
    scheme: SignatureScheme = SignatureScheme.TYPED_DATA


@dataclass(frozen=True)
class Offer:
    """Buyer's signed acceptance of an Order at or above its minimum price."""
    token_id: int
    price: int
    expire_time: int
    nonce: str
    signature: bytes
    need_proof: bool = False
    asset_contract: str = ZERO_ADDRESS
    scheme: SignatureScheme = SignatureScheme.TYPED_DATA


@dataclass(frozen=True)
class ValidatedTrade:
    """Output of the validation pipeline: authenticated parties plus resolved contract."""
    seller: str
    buyer: str
    asset_contract: str
    token_id: int
    price: int
    currency: str


@dataclass(frozen=True)
class FeeSplit:
    total_fee: int
    platform_fee: int
    partner_fee: int
    seller_amount: int


@dataclass(frozen=True)
class PaymentResult:
    split: FeeSplit
    partner: str | None
    funded_from_balance: bool
    refund: int = 0


@dataclass(frozen=True)
class SettlementResult:
    seller: str
    buyer: str
    token_id: int
    price: int
    currency: str
    asset_contract: str
    order_nonce: str
    offer_nonce: str
    payment: PaymentResult | None    # None for zero-price settlements
