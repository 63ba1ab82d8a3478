"""Digest strategies for Order and Offer messages.

Two encodings coexist and are both supported:

* TYPED_DATA (preferred): EIP-712 `keccak(0x1901 || domainSeparator || structHash)`.
  Field names and types are bound into the type hash, so an Order can never be
  replayed as an Offer.
* LEGACY_PACKED: `keccak(encode_packed(fields))`, rendered as 0x-hex text and
  wrapped in the EIP-191 "signed message" prefix with its decimal length.

chainId and verifyingContract are part of every digest in both schemes.
"""

from dataclasses import dataclass
from typing import Protocol

from eth_abi import encode as abi_encode
from eth_abi.packed import encode_packed
from eth_utils import encode_hex, keccak

from src.am_common.address import nonce_bytes
from src.am_common.enums import SignatureScheme
from src.am_settlement.domain.models import Offer, Order

EIP712_DOMAIN_TYPE = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
ORDER_TYPE = (
    "Order(uint256 tokenId,uint256 expectedPrice,address currency,uint256 expireTime,"
    "bytes32 nonce,address receiver,address nftContract,uint256 chainId,"
    "address verifyingContract)"
)
OFFER_TYPE = (
    "Offer(uint256 tokenId,uint256 offeredPrice,uint256 expireTime,bool needProof,"
    "bytes32 nonce,address nftContract,uint256 chainId,address verifyingContract)"
)

EIP712_DOMAIN_TYPEHASH = keccak(text=EIP712_DOMAIN_TYPE)
ORDER_TYPEHASH = keccak(text=ORDER_TYPE)
OFFER_TYPEHASH = keccak(text=OFFER_TYPE)

_ORDER_ABI_TYPES = [
    "uint256", "uint256", "address", "uint256", "bytes32",
    "address", "address", "uint256", "address",
]
_OFFER_ABI_TYPES = [
    "uint256", "uint256", "uint256", "bool", "bytes32",
    "address", "uint256", "address",
]

_EIP191_PREFIX = b"\x19Ethereum Signed Message:\n"


@dataclass(frozen=True)
class SigningDomain:
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    @property
    def separator(self) -> bytes:
        return keccak(
            abi_encode(
                ["bytes32", "bytes32", "bytes32", "uint256", "address"],
                [
                    EIP712_DOMAIN_TYPEHASH,
                    keccak(text=self.name),
                    keccak(text=self.version),
                    self.chain_id,
                    self.verifying_contract,
                ],
            )
        )


def _order_values(order: Order, domain: SigningDomain) -> list[object]:
    return [
        order.token_id,
        order.min_price,
        order.currency,
        order.expire_time,
        nonce_bytes(order.nonce),
        order.receiver,
        order.asset_contract,
        domain.chain_id,
        domain.verifying_contract,
    ]


def _offer_values(offer: Offer, domain: SigningDomain) -> list[object]:
    return [
        offer.token_id,
        offer.price,
        offer.expire_time,
        offer.need_proof,
        nonce_bytes(offer.nonce),
        offer.asset_contract,
        domain.chain_id,
        domain.verifying_contract,
    ]


class DigestStrategy(Protocol):
    def order_digest(self, order: Order, domain: SigningDomain) -> bytes: ...

    def offer_digest(self, offer: Offer, domain: SigningDomain) -> bytes: ...


class TypedDataDigest:
    """EIP-712 structured digest."""

    def order_digest(self, order: Order, domain: SigningDomain) -> bytes:
        struct_hash = keccak(
            abi_encode(["bytes32", *_ORDER_ABI_TYPES], [ORDER_TYPEHASH, *_order_values(order, domain)])
        )
        return keccak(b"\x19\x01" + domain.separator + struct_hash)

    def offer_digest(self, offer: Offer, domain: SigningDomain) -> bytes:
        struct_hash = keccak(
            abi_encode(["bytes32", *_OFFER_ABI_TYPES], [OFFER_TYPEHASH, *_offer_values(offer, domain)])
        )
        return keccak(b"\x19\x01" + domain.separator + struct_hash)


class LegacyPackedDigest:
    """Packed-field hash wrapped in the generic signed-message prefix."""

    def order_digest(self, order: Order, domain: SigningDomain) -> bytes:
        inner = keccak(encode_packed(_ORDER_ABI_TYPES, _order_values(order, domain)))
        return self._wrap(inner)

    def offer_digest(self, offer: Offer, domain: SigningDomain) -> bytes:
        inner = keccak(encode_packed(_OFFER_ABI_TYPES, _offer_values(offer, domain)))
        return self._wrap(inner)

    @staticmethod
    def _wrap(inner: bytes) -> bytes:
        text = encode_hex(inner).encode()
        return keccak(_EIP191_PREFIX + str(len(text)).encode() + text)


STRATEGIES: dict[SignatureScheme, DigestStrategy] = {
    SignatureScheme.TYPED_DATA: TypedDataDigest(),
    SignatureScheme.LEGACY_PACKED: LegacyPackedDigest(),
}
