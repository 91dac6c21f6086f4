"""
Guardian Signature Packing Test Suite

Tests for:
- Fixed/dynamic packed layout (ECDSA only, mixed, contract only)
- Ordering, duplicate and empty-set rejection
- Signature envelope encoding and decoding
- Local EIP-191 signing of user operation hashes

Usage:
    pytest tests/test_evm/test_signatures.py -v
"""

import pytest
from eth_abi import decode
from eth_account import Account
from eth_account.messages import encode_defunct
from pydantic import ValidationError

from test_mocks import (
    GUARDIAN_1,
    GUARDIAN_2,
    GUARDIAN_A,
    MOCK_ECDSA_SIGNATURE,
    MOCK_GUARDIAN_CONTRACT,
    MOCK_GUARDIAN_PRIVATE_KEY,
    MOCK_GUARDIAN_SIGNER_ADDRESS,
    MOCK_OWNER_ADDRESS,
    create_contract_signature,
    create_ecdsa_signature,
)

from aa_wallet.evm.constants import SignatureMode
from aa_wallet.evm.schemas import GuardianSignature
from aa_wallet.evm.signatures import (
    build_guardian_signature,
    decode_signature,
    encode_signature,
    pack_guardian_signatures,
    pack_guardians_sign_by_init_code,
    sign_user_op_hash,
    sort_guardian_signatures,
)
from aa_wallet.exceptions import DuplicateGuardianAddress, EmptySignatureSet

USER_OP_HASH = "0x" + "5a" * 32


def _packed_bytes(packed: str) -> bytes:
    assert packed.startswith("0x")
    return bytes.fromhex(packed[2:])


# ========================================================================
# GuardianSignature model
# ========================================================================

class TestGuardianSignatureModel:

    def test_type_inferred_from_flag(self):
        assert create_ecdsa_signature(GUARDIAN_1).signature_type == "ECDSA"
        assert create_contract_signature(GUARDIAN_1).signature_type == "EIP1271"

    def test_wire_alias(self):
        sig = GuardianSignature.model_validate(
            {"address": GUARDIAN_1, "signature": "0xdeadbeef", "contract": True}
        )
        assert sig.is_contract_wallet is True

    def test_ecdsa_length_enforced(self):
        with pytest.raises(ValidationError, match="65 bytes"):
            GuardianSignature(address=GUARDIAN_1, signature="0x" + "11" * 64)

    def test_contradicting_type_rejected(self):
        with pytest.raises(ValidationError):
            GuardianSignature(
                signature_type="ECDSA", address=GUARDIAN_1, signature="0xdeadbeef", is_contract_wallet=True
            )

    def test_invalid_address_rejected(self):
        with pytest.raises(ValidationError):
            create_ecdsa_signature("0x1234")


# ========================================================================
# Packing
# ========================================================================

class TestPackGuardianSignatures:

    def test_two_ecdsa_signatures(self):
        sig_1 = "0x" + "11" * 32 + "22" * 32 + "1b"
        sig_a = "0x" + "33" * 32 + "44" * 32 + "1c"

        packed = pack_guardian_signatures([
            create_ecdsa_signature(GUARDIAN_A, sig_a),
            create_ecdsa_signature(GUARDIAN_1, sig_1),
        ])

        assert packed == "0x" + sig_1[2:] + sig_a[2:]
        assert len(_packed_bytes(packed)) == 130
        assert len(packed) == 2 + 260

    def test_mixed_ecdsa_and_contract(self):
        contract_sig = create_contract_signature(GUARDIAN_1, payload_length=40)
        packed = _packed_bytes(pack_guardian_signatures([
            create_ecdsa_signature(GUARDIAN_A),
            contract_sig,
        ]))

        assert len(packed) == 202

        # GUARDIAN_1 sorts first: its fixed record points into the dynamic stream
        fixed_record = packed[:65]
        assert fixed_record[:32] == bytes(12) + bytes.fromhex(GUARDIAN_1[2:])
        assert int.from_bytes(fixed_record[32:64], "big") == 130
        assert fixed_record[64:] == b"\x00"

        assert packed[65:130] == bytes.fromhex(MOCK_ECDSA_SIGNATURE[2:])

        dynamic = packed[130:]
        assert int.from_bytes(dynamic[:32], "big") == 40
        assert dynamic[32:] == contract_sig.signature_bytes

    def test_contract_offsets_advance_per_slot(self):
        packed = _packed_bytes(pack_guardian_signatures([
            create_contract_signature(GUARDIAN_2, payload_length=10, fill="bb"),
            create_contract_signature(GUARDIAN_1, payload_length=10, fill="aa"),
        ]))

        assert int.from_bytes(packed[32:64], "big") == 65 * 2
        assert int.from_bytes(packed[65 + 32:65 + 64], "big") == 65 * 2 + 97
        assert len(packed) == 65 * 2 + 2 * (32 + 10)

    def test_length_law(self):
        signatures = [
            create_ecdsa_signature(GUARDIAN_A),
            create_contract_signature(GUARDIAN_1, payload_length=7),
            create_contract_signature(GUARDIAN_2, payload_length=100),
        ]
        packed = _packed_bytes(pack_guardian_signatures(signatures))
        assert len(packed) == 65 * 3 + (32 + 7) + (32 + 100)

    def test_input_order_irrelevant(self):
        a = create_ecdsa_signature(GUARDIAN_A)
        b = create_contract_signature(GUARDIAN_1)
        assert pack_guardian_signatures([a, b]) == pack_guardian_signatures([b, a])

    def test_caller_sequence_not_reordered(self):
        signatures = [create_ecdsa_signature(GUARDIAN_A), create_ecdsa_signature(GUARDIAN_1)]
        pack_guardian_signatures(signatures)
        assert [s.address for s in signatures] == [GUARDIAN_A, GUARDIAN_1]

    def test_empty_set_rejected(self):
        with pytest.raises(EmptySignatureSet, match="signature is empty"):
            pack_guardian_signatures([])

    def test_duplicate_signer_rejected(self):
        with pytest.raises(DuplicateGuardianAddress):
            pack_guardian_signatures([
                create_ecdsa_signature(GUARDIAN_A),
                create_contract_signature("0x" + GUARDIAN_A[2:].upper()),
            ])

    def test_sort_returns_new_list(self):
        signatures = [create_ecdsa_signature(GUARDIAN_2), create_ecdsa_signature(GUARDIAN_1)]
        ordered = sort_guardian_signatures(signatures)
        assert ordered is not signatures
        assert [s.address for s in ordered] == [GUARDIAN_1, GUARDIAN_2]


# ========================================================================
# Envelope
# ========================================================================

class TestSignatureEnvelope:

    def test_encode_decode(self):
        envelope = encode_signature(SignatureMode.OWNER, MOCK_OWNER_ADDRESS, "0xdeadbeef", 10, 20)
        mode, signer, data, valid_after, valid_until = decode_signature(envelope)

        assert mode is SignatureMode.OWNER
        assert signer == MOCK_OWNER_ADDRESS
        assert data == "0xdeadbeef"
        assert (valid_after, valid_until) == (10, 20)

    def test_abi_layout(self):
        envelope = encode_signature(SignatureMode.GUARDIAN, GUARDIAN_1, b"\x01\x02")
        mode, signer, data, valid_after, valid_until = decode(
            ["uint8", "address", "bytes", "uint64", "uint64"], bytes.fromhex(envelope[2:])
        )
        assert mode == 1
        assert data == b"\x01\x02"
        assert (valid_after, valid_until) == (0, 0)

    def test_inverted_window_rejected(self):
        with pytest.raises(ValueError):
            encode_signature(SignatureMode.OWNER, MOCK_OWNER_ADDRESS, "0x", valid_after=20, valid_until=10)

    def test_open_ended_window_allowed(self):
        envelope = encode_signature(SignatureMode.OWNER, MOCK_OWNER_ADDRESS, "0x", valid_after=20, valid_until=0)
        assert decode_signature(envelope)[3:] == (20, 0)

    def test_guardian_envelope_by_init_code(self):
        signatures = [create_ecdsa_signature(GUARDIAN_A), create_ecdsa_signature(GUARDIAN_1)]
        envelope = pack_guardians_sign_by_init_code(MOCK_GUARDIAN_CONTRACT, signatures, "0x6080", 1, 2)

        mode, signer, data, valid_after, valid_until = decode_signature(envelope)
        assert mode is SignatureMode.GUARDIAN
        assert signer.lower() == MOCK_GUARDIAN_CONTRACT
        assert (valid_after, valid_until) == (1, 2)

        packed, init_code = decode(["bytes", "bytes"], bytes.fromhex(data[2:]))
        assert "0x" + packed.hex() == pack_guardian_signatures(signatures)
        assert init_code == bytes.fromhex("6080")

    def test_guardian_envelope_without_init_code(self):
        envelope = pack_guardians_sign_by_init_code(MOCK_GUARDIAN_CONTRACT, [create_ecdsa_signature(GUARDIAN_1)])
        data = decode_signature(envelope)[2]
        _, init_code = decode(["bytes", "bytes"], bytes.fromhex(data[2:]))
        assert init_code == b""


# ========================================================================
# Local signing
# ========================================================================

class TestLocalSigning:

    def test_signature_recovers_signer(self):
        signature = sign_user_op_hash(MOCK_GUARDIAN_PRIVATE_KEY, USER_OP_HASH)
        assert len(bytes.fromhex(signature[2:])) == 65

        recovered = Account.recover_message(encode_defunct(hexstr=USER_OP_HASH), signature=signature)
        assert recovered == MOCK_GUARDIAN_SIGNER_ADDRESS

    def test_build_guardian_signature(self):
        sig = build_guardian_signature(MOCK_GUARDIAN_PRIVATE_KEY, USER_OP_HASH)
        assert sig.address == MOCK_GUARDIAN_SIGNER_ADDRESS
        assert sig.signature_type == "ECDSA"
        assert pack_guardian_signatures([sig]) == sig.signature
