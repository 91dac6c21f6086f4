"""
CREATE2 address computation utilities (EIP-1014).

CREATE2 allows deterministic contract address generation before deployment.
The address is computed as:
    address = keccak256(0xff ++ deployer_address ++ salt ++ keccak256(init_code))[12:]

Wallet and guardian addresses are derived this way from the singleton
factory, so the result must agree byte-for-byte with the on-chain rule.

Reference: https://eips.ethereum.org/EIPS/eip-1014
"""

from typing import Union

from eth_utils import keccak, to_checksum_address

from ..exceptions import InvalidLengthError
from .utils import hex_to_bytes


def compute_create2_address(
    sender: bytes,
    salt: bytes,
    init_code: bytes,
) -> bytes:
    """
    Compute CREATE2 contract address.

    The contract address is the last 20 bytes of:
        keccak256(0xff ++ sender ++ salt ++ keccak256(init_code))

    Args:
        sender: 20-byte deployer (factory) address
        salt: 32-byte salt value
        init_code: Contract initialization code (bytecode ++ constructor args)

    Returns:
        20-byte predicted contract address

    Raises:
        InvalidLengthError: If sender is not 20 bytes or salt is not 32 bytes

    Example:
        >>> sender = bytes.fromhex("deadbeef" * 5)
        >>> salt = bytes(32)
        >>> init_code = bytes.fromhex("602a60005260206000f3")
        >>> len(compute_create2_address(sender, salt, init_code))
        20
    """
    return compute_create2_address_with_code_hash(sender, salt, keccak(init_code))


def compute_create2_address_with_code_hash(
    sender: bytes,
    salt: bytes,
    init_code_hash: bytes,
) -> bytes:
    """
    Compute CREATE2 address with pre-computed init_code hash.

    Args:
        sender: 20-byte deployer address
        salt: 32-byte salt value
        init_code_hash: 32-byte keccak256 hash of init_code

    Returns:
        20-byte predicted contract address

    Raises:
        InvalidLengthError: If lengths are incorrect
    """
    if len(sender) != 20:
        raise InvalidLengthError(f"Sender must be 20 bytes, got {len(sender)}")
    if len(salt) != 32:
        raise InvalidLengthError(f"Salt must be 32 bytes, got {len(salt)}")
    if len(init_code_hash) != 32:
        raise InvalidLengthError(f"Init code hash must be 32 bytes, got {len(init_code_hash)}")

    preimage = b'\xff' + sender + salt + init_code_hash
    return keccak(preimage)[12:]


def derive_address(
    factory: Union[str, bytes],
    salt: Union[str, bytes],
    init_code: Union[str, bytes],
) -> str:
    """
    Hex-facing wrapper around :func:`compute_create2_address`.

    Accepts 0x-prefixed hex strings or raw bytes for every argument and
    returns the EIP-55 checksummed address, the form wallet and guardian
    addresses are displayed and compared in.

    Args:
        factory: Deployer address (20 bytes)
        salt: Normalized 32-byte salt (see ``aa_wallet.evm.salt.normalize_salt``)
        init_code: Init code as built by ``aa_wallet.evm.initcode``

    Returns:
        str: Checksummed 0x-prefixed address
    """
    address = compute_create2_address(
        hex_to_bytes(factory),
        hex_to_bytes(salt),
        hex_to_bytes(init_code),
    )
    return to_checksum_address(address)
