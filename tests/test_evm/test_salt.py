"""
Salt Normalization Tests

The three-way dispatch must be idempotent: a canonical salt is never
re-hashed.
"""

import pytest
from eth_abi import encode
from eth_utils import keccak

import test_mocks  # noqa: F401

from aa_wallet.evm.salt import hash_salt_string, normalize_salt, number_to_bytes32
from aa_wallet.exceptions import InvalidLengthError


class TestNumberToBytes32:

    def test_none_is_zero(self):
        assert number_to_bytes32() == "0x" + "00" * 32
        assert number_to_bytes32(None) == "0x" + "00" * 32

    def test_small_number_left_padded(self):
        assert number_to_bytes32(1) == "0x" + "00" * 31 + "01"
        assert number_to_bytes32(0xcafebabe) == "0x" + "00" * 28 + "cafebabe"

    def test_max_uint256(self):
        assert number_to_bytes32(2 ** 256 - 1) == "0x" + "ff" * 32

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            number_to_bytes32(2 ** 256)
        with pytest.raises(ValueError):
            number_to_bytes32(-1)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            number_to_bytes32(True)


class TestNormalizeSalt:

    def test_int_matches_number_to_bytes32(self):
        assert normalize_salt(42) == number_to_bytes32(42)

    def test_none_is_zero_salt(self):
        assert normalize_salt(None) == "0x" + "00" * 32

    def test_canonical_string_used_verbatim(self):
        salt = "0x" + "ab" * 32
        assert normalize_salt(salt) == salt

    def test_idempotent(self):
        for value in (0, 7, "my-recovery-set", "0x" + "12" * 32, bytes(range(32))):
            once = normalize_salt(value)
            assert normalize_salt(once) == once

    def test_arbitrary_string_is_hashed(self):
        expected = "0x" + keccak(encode(["string"], ["hello"])).hex()
        assert normalize_salt("hello") == expected
        assert hash_salt_string("hello") == expected

    def test_uppercase_hex_string_is_hashed(self):
        salt = "0x" + "AB" * 32
        assert normalize_salt(salt) != salt
        assert normalize_salt(salt) == hash_salt_string(salt)

    def test_short_hex_string_is_hashed(self):
        assert normalize_salt("0x01") == hash_salt_string("0x01")

    def test_trailing_newline_is_hashed(self):
        salt = "0x" + "ab" * 32 + "\n"
        assert normalize_salt(salt) == hash_salt_string(salt)

    def test_bytes32_used_verbatim(self):
        raw = bytes(range(32))
        assert normalize_salt(raw) == "0x" + raw.hex()

    def test_wrong_length_bytes_rejected(self):
        with pytest.raises(InvalidLengthError):
            normalize_salt(bytes(31))

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError):
            normalize_salt(1.5)

    def test_output_shape(self):
        for value in (None, 0, 2 ** 255, "x", bytes(32)):
            salt = normalize_salt(value)
            assert salt.startswith("0x")
            assert len(salt) == 66
            assert salt == salt.lower()
