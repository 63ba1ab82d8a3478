"""Domain models for am_registry — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field

from src.am_common.address import ZERO_ADDRESS


@dataclass(frozen=True)
class IntelligentData:
    """One encrypted payload attached to an asset, identified by its content hash."""
    description: str
    data_hash: str          # 0x bytes32


@dataclass
class Asset:
    contract: str
    token_id: int
    owner: str
    creator: str = ZERO_ADDRESS     # zero = no creator attribution
    approved: str = ZERO_ADDRESS    # single-token operator approval
    uri: str = ""
    data: list[IntelligentData] = field(default_factory=list)


@dataclass(frozen=True)
class TransferProof:
    """Oracle attestation that one data payload was re-encrypted for the new owner."""
    token_id: int
    old_data_hash: str      # 0x bytes32
    new_data_hash: str      # 0x bytes32
    sealed_key: bytes       # new owner's sealed decryption key
    nonce: str              # canonical bytes32 hex, consumed once
    signature: bytes        # 65-byte EIP-191 signature by the oracle
