"""Unit tests for address/nonce normalisation and integer amount helpers."""

import pytest

from src.am_common.address import (
    ZERO_ADDRESS,
    is_zero_address,
    nonce_bytes,
    to_address,
    to_data_hash,
    to_nonce,
    to_nonzero_address,
    to_optional_address,
)
from src.am_common.errors import InvalidAddressError, InvalidDataHashError, InvalidNonceError
from src.am_common.units import bps_of, format_units
from tests.support import SELLER


class TestToAddress:
    def test_lowercase_is_checksummed(self) -> None:
        assert to_address(SELLER.lower()) == SELLER

    def test_raw_bytes_accepted(self) -> None:
        assert to_address(bytes.fromhex(SELLER[2:])) == SELLER

    def test_garbage_rejected_with_field_name(self) -> None:
        with pytest.raises(InvalidAddressError) as exc_info:
            to_address("0x1234", "receiver")
        assert exc_info.value.code == 2001
        assert "receiver" in exc_info.value.message

    def test_optional_maps_empty_to_zero(self) -> None:
        assert to_optional_address(None) == ZERO_ADDRESS
        assert to_optional_address("") == ZERO_ADDRESS
        assert is_zero_address(to_optional_address(None))

    def test_nonzero_rejects_zero(self) -> None:
        with pytest.raises(InvalidAddressError):
            to_nonzero_address(ZERO_ADDRESS)


class TestToNonce:
    def test_numeric_nonce_left_padded(self) -> None:
        assert to_nonce(1) == "0x" + "00" * 31 + "01"

    def test_hex_nonce_lowercased(self) -> None:
        assert to_nonce("0x" + "AB" * 32) == "0x" + "ab" * 32

    def test_raw_bytes_roundtrip(self) -> None:
        raw = bytes(range(32))
        assert nonce_bytes(to_nonce(raw)) == raw

    def test_numeric_and_hex_spellings_are_the_same_nonce(self) -> None:
        assert to_nonce(255) == to_nonce("0x" + "00" * 31 + "ff")

    @pytest.mark.parametrize(
        "value", [-1, 1 << 256, True, b"\x00" * 31, "0x1234", "ab" * 33, None, 1.5]
    )
    def test_invalid_nonces(self, value: object) -> None:
        with pytest.raises(InvalidNonceError):
            to_nonce(value)


class TestToDataHash:
    def test_lowercased(self) -> None:
        assert to_data_hash("0x" + "AB" * 32) == "0x" + "ab" * 32

    @pytest.mark.parametrize(
        "value", ["0x" + "22" * 33, "0x" + "22" * 31, "22" * 32, "0x" + "zz" * 32, None]
    )
    def test_non_bytes32_rejected(self, value: object) -> None:
        with pytest.raises(InvalidDataHashError) as exc_info:
            to_data_hash(value, "proof.new_data_hash")
        assert exc_info.value.code == 2019
        assert "proof.new_data_hash" in exc_info.value.message


class TestUnits:
    def test_bps_floors(self) -> None:
        assert bps_of(999, 250) == 24
        assert bps_of(100 * 10**18, 250) == 25 * 10**17

    def test_format_whole_and_fraction(self) -> None:
        assert format_units(97_500_000_000_000_000_000) == "97.5"
        assert format_units(10**18) == "1"
        assert format_units(0) == "0"
        assert format_units(1) == "0.000000000000000001"

    def test_format_negative_and_custom_decimals(self) -> None:
        assert format_units(-150, decimals=2) == "-1.5"
