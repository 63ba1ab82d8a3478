"""Recovers the signer of an Order or Offer.

The recovered address is not validated here: a garbage signature recovers to
some unrelated address, and the ownership / balance checks downstream reject it.
"""

import logging

from eth_abi.exceptions import EncodingError
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from src.am_common.enums import SignatureScheme
from src.am_common.errors import (
    InvalidSignatureError,
    InvalidSignatureLengthError,
    UnencodableFieldError,
)
from src.am_settlement.domain.models import Offer, Order
from src.am_signing.domain.digest import STRATEGIES, DigestStrategy, SigningDomain

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65


def recover_signer(digest: bytes, signature: bytes) -> str:
    """Recover the checksum address that produced `signature` over `digest`."""
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureLengthError(len(signature))

    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    # Wallets emit either 27/28 or 0/1
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise InvalidSignatureError(f"bad recovery id {signature[64]}")

    try:
        public_key = keys.Signature(vrs=(v, r, s)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as exc:
        raise InvalidSignatureError(str(exc)) from exc
    return public_key.to_checksum_address()


class SignatureVerifier:
    def __init__(
        self,
        domain: SigningDomain,
        strategies: dict[SignatureScheme, DigestStrategy] | None = None,
    ) -> None:
        self._domain = domain
        self._strategies = strategies or STRATEGIES

    @property
    def domain(self) -> SigningDomain:
        return self._domain

    def _strategy(self, scheme: SignatureScheme) -> DigestStrategy:
        return self._strategies[scheme]

    def order_digest(self, order: Order) -> bytes:
        try:
            return self._strategy(order.scheme).order_digest(order, self._domain)
        except EncodingError as exc:
            raise UnencodableFieldError(f"order: {exc}") from None

    def offer_digest(self, offer: Offer) -> bytes:
        try:
            return self._strategy(offer.scheme).offer_digest(offer, self._domain)
        except EncodingError as exc:
            raise UnencodableFieldError(f"offer: {exc}") from None

    def recover_order_signer(self, order: Order) -> str:
        signer = recover_signer(self.order_digest(order), order.signature)
        logger.debug("Order nonce=%s signed by %s (%s)", order.nonce, signer, order.scheme.value)
        return signer

    def recover_offer_signer(self, offer: Offer) -> str:
        signer = recover_signer(self.offer_digest(offer), offer.signature)
        logger.debug("Offer nonce=%s signed by %s (%s)", offer.nonce, signer, offer.scheme.value)
        return signer
