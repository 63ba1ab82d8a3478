"""Pydantic schemas for the settlement API.

Amounts are uint256 and may exceed JSON's safe integer range, so requests
accept either numbers or decimal strings and responses always return strings.
"""

from eth_utils import decode_hex
from pydantic import BaseModel, Field

from src.am_common.address import UINT256_MAX, to_data_hash, to_nonce, to_optional_address
from src.am_common.enums import NonceScope, SignatureScheme
from src.am_common.errors import InvalidSignatureError
from src.am_common.units import format_units
from src.am_registry.domain.models import TransferProof
from src.am_settlement.domain.models import Offer, Order, SettlementResult


def _decode_bytes(value: str, field: str) -> bytes:
    try:
        return decode_hex(value)
    except ValueError:
        raise InvalidSignatureError(f"{field} is not hex") from None


class OrderIn(BaseModel):
    token_id: int = Field(..., ge=0, le=UINT256_MAX)
    min_price: int = Field(
        ..., ge=0, le=UINT256_MAX, description="Minimum acceptable price in smallest units"
    )
    currency: str | None = Field(None, description="ERC-20 address; empty = native currency")
    expire_time: int = Field(..., ge=0, le=UINT256_MAX, description="Unix seconds")
    nonce: int | str = Field(..., description="bytes32 hex, or a legacy numeric nonce")
    receiver: str | None = None
    asset_contract: str | None = None
    signature: str
    scheme: SignatureScheme = SignatureScheme.TYPED_DATA

    def to_domain(self) -> Order:
        return Order(
            token_id=self.token_id,
            min_price=self.min_price,
            currency=to_optional_address(self.currency, "currency"),
            expire_time=self.expire_time,
            nonce=to_nonce(self.nonce),
            receiver=to_optional_address(self.receiver, "receiver"),
            asset_contract=to_optional_address(self.asset_contract, "asset_contract"),
            signature=_decode_bytes(self.signature, "order.signature"),
            scheme=self.scheme,
        )


class OfferIn(BaseModel):
    token_id: int = Field(..., ge=0, le=UINT256_MAX)
    price: int = Field(..., ge=0, le=UINT256_MAX)
    expire_time: int = Field(..., ge=0, le=UINT256_MAX)
    need_proof: bool = False
    nonce: int | str
    asset_contract: str | None = None
    signature: str
    scheme: SignatureScheme = SignatureScheme.TYPED_DATA

    def to_domain(self) -> Offer:
        return Offer(
            token_id=self.token_id,
            price=self.price,
            expire_time=self.expire_time,
            nonce=to_nonce(self.nonce),
            signature=_decode_bytes(self.signature, "offer.signature"),
            need_proof=self.need_proof,
            asset_contract=to_optional_address(self.asset_contract, "asset_contract"),
            scheme=self.scheme,
        )


class TransferProofIn(BaseModel):
    token_id: int = Field(..., ge=0, le=UINT256_MAX)
    old_data_hash: str
    new_data_hash: str
    sealed_key: str = Field(..., description="0x-hex sealed key for the new owner")
    nonce: str
    signature: str

    def to_domain(self) -> TransferProof:
        return TransferProof(
            token_id=self.token_id,
            old_data_hash=to_data_hash(self.old_data_hash, "proof.old_data_hash"),
            new_data_hash=to_data_hash(self.new_data_hash, "proof.new_data_hash"),
            sealed_key=_decode_bytes(self.sealed_key, "proof.sealed_key"),
            nonce=to_nonce(self.nonce),
            signature=_decode_bytes(self.signature, "proof.signature"),
        )


class FulfillRequest(BaseModel):
    order: OrderIn
    offer: OfferIn
    proofs: list[TransferProofIn] = Field(default_factory=list)
    value: int = Field(0, ge=0, le=UINT256_MAX, description="Native value attached to the call")


class FulfillResponse(BaseModel):
    seller: str
    buyer: str
    token_id: int
    price: str
    price_display: str
    currency: str
    asset_contract: str
    order_nonce: str
    offer_nonce: str
    seller_amount: str
    platform_fee: str
    partner_fee: str
    partner: str | None
    refund: str

    @classmethod
    def from_result(cls, result: SettlementResult) -> "FulfillResponse":
        payment = result.payment
        split = payment.split if payment else None
        return cls(
            seller=result.seller,
            buyer=result.buyer,
            token_id=result.token_id,
            price=str(result.price),
            price_display=format_units(result.price),
            currency=result.currency,
            asset_contract=result.asset_contract,
            order_nonce=result.order_nonce,
            offer_nonce=result.offer_nonce,
            seller_amount=str(split.seller_amount if split else 0),
            platform_fee=str(split.platform_fee if split else 0),
            partner_fee=str(split.partner_fee if split else 0),
            partner=payment.partner if payment else None,
            refund=str(payment.refund if payment else 0),
        )


class NonceStatusResponse(BaseModel):
    scope: NonceScope
    nonce: str
    used: bool


def parse_nonce_param(nonce: str) -> str:
    """Path parameter form: decimal digits are a legacy numeric nonce, else bytes32 hex."""
    return to_nonce(int(nonce) if nonce.isdigit() else nonce)

