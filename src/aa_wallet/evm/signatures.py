"""
Guardian Signature Packing and Signing Utilities

Packs collected guardian signatures into the byte layout the on-chain
guardian verifier decodes, wraps them in a signature envelope for a user
operation, and signs user-operation hashes locally with ``eth_account``.

Packed layout
-------------
Signatures are sorted ascending by signer address (as an unsigned integer)
and split into two streams::

    0x || fixed[0] || ... || fixed[n-1] || dynamic[0] || ... || dynamic[m-1]

fixed (65 bytes each)
    ECDSA signer:     r (32) || s (32) || v (1), verbatim.
    Contract signer:  address left-padded to 32 bytes
                      || 32-byte offset = 65 * n + i * (32 + 65)
                      || 0x00
    where ``i`` counts contract signers already emitted (0-based).

dynamic (contract signers only, same order)
    32-byte big-endian payload length || payload

Exported helpers
----------------
pack_guardian_signatures
    Build the packed blob from ``GuardianSignature`` objects.

encode_signature / decode_signature
    Signature envelope ``abi.encode(uint8 mode, address signer, bytes data,
    uint64 validAfter, uint64 validUntil)``.

pack_guardians_sign_by_init_code
    Packed guardian signatures + guardian init code, wrapped in a
    ``SignatureMode.GUARDIAN`` envelope.

sign_user_op_hash / build_guardian_signature
    Local EIP-191 signing of a user-operation hash.
"""

from typing import Iterable, List, Tuple, Union

from eth_abi import decode, encode
from eth_account import Account
from eth_account.messages import encode_defunct

from ..exceptions import EmptySignatureSet
from .constants import (
    CONTRACT_SIGNATURE_SENTINEL,
    CONTRACT_SIGNATURE_SLOT,
    ECDSA_SIGNATURE_LENGTH,
    WORD_LENGTH,
    SignatureMode,
)
from .schemas import GuardianSignature
from .utils import address_to_int, bytes_to_hex, hex_to_bytes, sort_unique_addresses, to_address

_ENVELOPE_TYPES = ["uint8", "address", "bytes", "uint64", "uint64"]


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

def sort_guardian_signatures(signatures: Iterable[GuardianSignature]) -> List[GuardianSignature]:
    """
    Return a new list sorted ascending by signer address.

    Raises:
        EmptySignatureSet: If ``signatures`` is empty.
        DuplicateGuardianAddress: If two signatures share a signer address.
    """
    items = list(signatures)
    if not items:
        raise EmptySignatureSet("signature is empty")
    sort_unique_addresses(item.address for item in items)
    return sorted(items, key=lambda item: address_to_int(item.address))


# ---------------------------------------------------------------------------
# Packing
# ---------------------------------------------------------------------------

def pack_guardian_signatures(signatures: Iterable[GuardianSignature]) -> str:
    """
    Pack guardian signatures into the verifier's fixed/dynamic layout.

    The caller's sequence is not reordered or modified.

    Args:
        signatures: Collected guardian signatures, in any order.

    Returns:
        str: ``0x``-prefixed lowercase hex blob.

    Raises:
        EmptySignatureSet: If no signatures are given.
        DuplicateGuardianAddress: If two signatures share a signer.

    Example::

        packed = pack_guardian_signatures([
            GuardianSignature(address=guardian_b, signature=sig_b),
            GuardianSignature(address=guardian_a, signature=sig_a),
        ])
        # 0x || sig_a || sig_b  (130 bytes when guardian_a < guardian_b)
    """
    ordered = sort_guardian_signatures(signatures)
    total = len(ordered)

    fixed = bytearray()
    dynamic = bytearray()
    contract_index = 0
    for item in ordered:
        payload = item.signature_bytes
        if item.is_contract_wallet:
            signer = hex_to_bytes(item.address.lower())
            offset = ECDSA_SIGNATURE_LENGTH * total + contract_index * CONTRACT_SIGNATURE_SLOT
            fixed += signer.rjust(WORD_LENGTH, b"\x00")
            fixed += offset.to_bytes(WORD_LENGTH, "big")
            fixed += CONTRACT_SIGNATURE_SENTINEL
            dynamic += len(payload).to_bytes(WORD_LENGTH, "big") + payload
            contract_index += 1
        else:
            fixed += payload

    return bytes_to_hex(bytes(fixed) + bytes(dynamic))


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

def encode_signature(
    mode: SignatureMode,
    signer: str,
    signature: Union[str, bytes],
    valid_after: int = 0,
    valid_until: int = 0,
) -> str:
    """
    Wrap ``signature`` in a mode-tagged envelope carried by ``UserOperation.signature``.

    Args:
        mode: ``SignatureMode.OWNER`` or ``SignatureMode.GUARDIAN``.
        signer: Owner address or guardian contract address.
        signature: Mode-specific signature data.
        valid_after: Unix timestamp the operation is valid from (0 = immediately).
        valid_until: Unix timestamp the operation expires at (0 = never).

    Returns:
        str: 0x-prefixed ``abi.encode(uint8, address, bytes, uint64, uint64)``.

    Raises:
        ValueError: If ``valid_until`` is set and precedes ``valid_after``.
    """
    if valid_until and valid_after > valid_until:
        raise ValueError(
            f"valid_after ({valid_after}) must not be later than valid_until ({valid_until})"
        )
    encoded = encode(
        _ENVELOPE_TYPES,
        [int(SignatureMode(mode)), to_address(signer), hex_to_bytes(signature), valid_after, valid_until],
    )
    return bytes_to_hex(encoded)


def decode_signature(envelope: Union[str, bytes]) -> Tuple[SignatureMode, str, str, int, int]:
    """
    Inverse of :func:`encode_signature`.

    Returns:
        (mode, signer, signature data as hex, valid_after, valid_until)
    """
    mode, signer, data, valid_after, valid_until = decode(_ENVELOPE_TYPES, hex_to_bytes(envelope))
    return SignatureMode(mode), to_address(signer), bytes_to_hex(data), valid_after, valid_until


def pack_guardians_sign_by_init_code(
    guardian_address: str,
    signatures: Iterable[GuardianSignature],
    init_code: str = "0x",
    valid_after: int = 0,
    valid_until: int = 0,
) -> str:
    """
    Guardian-signed envelope for a user operation.

    The envelope data is ``abi.encode(bytes packedSignatures, bytes initCode)``;
    ``init_code`` deploys the guardian contract on first use and is ``0x``
    once it exists.
    """
    packed = pack_guardian_signatures(signatures)
    guardian_call_data = encode(["bytes", "bytes"], [hex_to_bytes(packed), hex_to_bytes(init_code)])
    return encode_signature(SignatureMode.GUARDIAN, guardian_address, guardian_call_data, valid_after, valid_until)


# ---------------------------------------------------------------------------
# Local signing
# ---------------------------------------------------------------------------

def sign_user_op_hash(private_key: str, user_op_hash: str) -> str:
    """
    Sign a user-operation hash with an EIP-191 personal-message signature.

    Args:
        private_key: Hex-encoded secp256k1 private key (0x prefix optional).
        user_op_hash: 32-byte hash from ``UserOperationModel.get_user_op_hash``.

    Returns:
        str: 0x-prefixed 65-byte ``r || s || v`` signature.
    """
    signed = Account.sign_message(encode_defunct(hexstr=user_op_hash), private_key=private_key)
    return bytes_to_hex(bytes(signed.signature))


def build_guardian_signature(private_key: str, user_op_hash: str) -> GuardianSignature:
    """Sign ``user_op_hash`` and return it as an ECDSA ``GuardianSignature``."""
    account = Account.from_key(private_key)
    return GuardianSignature(
        address=account.address,
        signature=sign_user_op_hash(private_key, user_op_hash),
        is_contract_wallet=False,
    )
