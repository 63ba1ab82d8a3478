"""Address and nonce normalisation.

Addresses are stored and compared in EIP-55 checksum form. Nonces are stored as
0x-prefixed lowercase 32-byte hex; legacy numeric nonces are left-padded.
"""

from eth_utils import decode_hex, encode_hex, is_address, is_hexstr, to_checksum_address

from src.am_common.errors import InvalidAddressError, InvalidDataHashError, InvalidNonceError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_CURRENCY = ZERO_ADDRESS  # sentinel: settle in the chain's native coin

UINT256_MAX = (1 << 256) - 1


def to_address(value: object, field: str = "address") -> str:
    """Validate and checksum an address. Raises InvalidAddressError (2001)."""
    if isinstance(value, bytes) and len(value) == 20:
        value = encode_hex(value)
    if not isinstance(value, str) or not is_address(value):
        raise InvalidAddressError(field, value)
    return to_checksum_address(value)


def to_optional_address(value: object, field: str = "address") -> str:
    """Like to_address, but None / empty string map to the zero address."""
    if value is None or value == "":
        return ZERO_ADDRESS
    return to_address(value, field)


def to_nonzero_address(value: object, field: str = "address") -> str:
    address = to_address(value, field)
    if address == ZERO_ADDRESS:
        raise InvalidAddressError(field, value)
    return address


def is_zero_address(address: str) -> bool:
    return address == ZERO_ADDRESS


def to_nonce(value: object) -> str:
    """Canonical bytes32 nonce: int (legacy numeric), 32 raw bytes, or 0x hex."""
    if isinstance(value, bool):
        raise InvalidNonceError(value)
    if isinstance(value, int):
        if not 0 <= value <= UINT256_MAX:
            raise InvalidNonceError(value)
        return encode_hex(value.to_bytes(32, "big"))
    if isinstance(value, bytes):
        if len(value) != 32:
            raise InvalidNonceError(value)
        return encode_hex(value)
    if isinstance(value, str) and len(value) == 66 and value.startswith("0x") and is_hexstr(value):
        return value.lower()
    raise InvalidNonceError(value)


def nonce_bytes(nonce: str) -> bytes:
    return decode_hex(nonce)


def to_data_hash(value: object, field: str = "data_hash") -> str:
    """Canonical 0x-prefixed lowercase bytes32 content hash."""
    if isinstance(value, str) and len(value) == 66 and value.startswith("0x") and is_hexstr(value):
        return value.lower()
    raise InvalidDataHashError(field, value)
