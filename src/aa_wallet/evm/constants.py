"""
EVM Wallet Constants and Environment Configuration

Well-known addresses, wire-format constants and environment-variable
accessors used by the wallet and guardian facades.  Nothing here is mutable
process state: defaults are plain constants and are only applied when a
``WalletConfig`` is constructed without an explicit value.
"""

import os
import re
from enum import IntEnum
from typing import Optional

# ---------------------------------------------------------------------------
# Well-known addresses
# ---------------------------------------------------------------------------

#: EIP-2470 singleton factory; the same address on every EVM network.
SINGLETON_FACTORY_ADDRESS: str = "0xce0042B868300000d44A59004Da54A005ffdcf9f"

#: ERC-4337 EntryPoint v0.6 deployment.
ENTRY_POINT_V06_ADDRESS: str = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"

ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"

BYTES32_ZERO: str = "0x" + "00" * 32

# ---------------------------------------------------------------------------
# Wire-format constants
# ---------------------------------------------------------------------------

#: Canonical salt form: 0x + 64 lowercase hex digits.  Anything else is hashed.
BYTES32_PATTERN = re.compile(r"^0x[a-f0-9]{64}$")

#: r (32) + s (32) + v (1)
ECDSA_SIGNATURE_LENGTH: int = 65

#: Length prefix of a dynamic-stream record.
WORD_LENGTH: int = 32

#: Slot reserved per contract-wallet signature when computing dynamic offsets.
CONTRACT_SIGNATURE_SLOT: int = WORD_LENGTH + ECDSA_SIGNATURE_LENGTH

#: Recovery-id byte marking a fixed record as a pointer into the dynamic stream.
CONTRACT_SIGNATURE_SENTINEL: bytes = b"\x00"


class SignatureMode(IntEnum):
    """
    Discriminator carried in the first field of a signature envelope.

    Attributes:
        OWNER: Operation authorized by the wallet owner key.
        GUARDIAN: Operation authorized by the guardian set.
    """
    OWNER = 0
    GUARDIAN = 1


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

ENV_SINGLETON_FACTORY = "AA_WALLET_SINGLETON_FACTORY"
ENV_PROXY_ARTIFACT = "AA_WALLET_PROXY_ARTIFACT"
ENV_GUARDIAN_PROXY_ARTIFACT = "AA_WALLET_GUARDIAN_PROXY_ARTIFACT"
ENV_FACTORY_ARTIFACT = "AA_WALLET_FACTORY_ARTIFACT"


def get_singleton_factory_from_env() -> Optional[str]:
    """
    Load the singleton factory address override from environment variables.

    Environment Variable:
        - AA_WALLET_SINGLETON_FACTORY: 0x-prefixed factory address

    Returns:
        str: Address from environment, or None if not configured

    Example:
        # In your .env file or environment setup:
        # export AA_WALLET_SINGLETON_FACTORY="0xce0042B868300000d44A59004Da54A005ffdcf9f"
    """
    return os.getenv(ENV_SINGLETON_FACTORY)


def get_artifact_path_from_env(name: str) -> Optional[str]:
    """
    Load a contract artifact path from environment variables.

    Args:
        name: One of ``ENV_PROXY_ARTIFACT``, ``ENV_GUARDIAN_PROXY_ARTIFACT``
            or ``ENV_FACTORY_ARTIFACT``.

    Returns:
        str: Path to a Hardhat/Foundry JSON artifact, or None if not configured
    """
    return os.getenv(name)
