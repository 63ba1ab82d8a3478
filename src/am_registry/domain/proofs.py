"""Transfer-validity proofs attested by a trusted oracle.

The oracle signs `keccak(encode_packed(tokenId, oldDataHash, newDataHash,
sealedKey, nonce))` as an EIP-191 personal message. A proof is valid when the
recovered signer is the configured oracle address.
"""

import logging

from eth_abi.packed import encode_packed
from eth_account import Account
from eth_abi.exceptions import EncodingError
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import decode_hex, keccak

from src.am_common.address import nonce_bytes
from src.am_registry.domain.models import TransferProof

logger = logging.getLogger(__name__)

_PROOF_ABI_TYPES = ["uint256", "bytes32", "bytes32", "bytes", "bytes32"]


def proof_digest(proof: TransferProof) -> bytes:
    return keccak(
        encode_packed(
            _PROOF_ABI_TYPES,
            [
                proof.token_id,
                decode_hex(proof.old_data_hash),
                decode_hex(proof.new_data_hash),
                proof.sealed_key,
                nonce_bytes(proof.nonce),
            ],
        )
    )


class OracleProofVerifier:
    def __init__(self, oracle: str) -> None:
        self._oracle = oracle

    @property
    def oracle(self) -> str:
        return self._oracle

    def verify(self, proof: TransferProof) -> bool:
        if len(proof.signature) != 65:
            return False
        try:
            signer = Account.recover_message(
                encode_defunct(primitive=proof_digest(proof)), signature=proof.signature
            )
        except (BadSignature, ValidationError, ValueError, EncodingError):
            logger.info("Unrecoverable proof signature for token %d", proof.token_id)
            return False
        return signer == self._oracle
