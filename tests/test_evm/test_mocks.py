"""
Wallet and Guardian Test Mocks Module

Provides mock data and helpers for testing the wallet, guardian and
signature-packing code without any blockchain connectivity.

Key Components:
    - Fixed EVM addresses, private keys and delays
    - Proxy and wallet factory artifacts with stand-in creation bytecode
    - Guardian signature factories (ECDSA and EIP-1271)
    - Mock AsyncWeb3 instances whose contracts return preset view results

Usage:
    from test_mocks import (
        create_wallet_config,
        create_ecdsa_signature,
        MockWeb3Provider,
    )

    config = create_wallet_config()
    w3 = MockWeb3Provider(call_results={"nonce": 7}, code=b"\\x60\\x80")
"""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, Mock

from eth_account import Account
from web3 import AsyncWeb3

# Import schemas from the main codebase
import sys
from pathlib import Path
src_path = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(src_path))

from aa_wallet.evm.abis import get_wallet_factory_abi, get_wallet_proxy_abi
from aa_wallet.evm.schemas import ContractArtifact, GuardianSignature, WalletConfig


# ========================================================================
# Mock Blockchain Constants
# ========================================================================

# Test private keys (do not use in production!)
MOCK_OWNER_PRIVATE_KEY = "0x1234567890123456789012345678901234567890123456789012345678901234"
MOCK_GUARDIAN_PRIVATE_KEY = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcd"

MOCK_OWNER_ADDRESS = AsyncWeb3.to_checksum_address(Account.from_key(MOCK_OWNER_PRIVATE_KEY).address)
MOCK_GUARDIAN_SIGNER_ADDRESS = AsyncWeb3.to_checksum_address(
    Account.from_key(MOCK_GUARDIAN_PRIVATE_KEY).address
)

# Guardian addresses whose numeric order is obvious from the repeated digit
GUARDIAN_1 = "0x1111111111111111111111111111111111111111"
GUARDIAN_2 = "0x2222222222222222222222222222222222222222"
GUARDIAN_A = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"

MOCK_WALLET_LOGIC = "0x3333333333333333333333333333333333333333"
MOCK_GUARDIAN_LOGIC = "0x4444444444444444444444444444444444444444"
MOCK_WALLET_FACTORY = "0x5555555555555555555555555555555555555555"
MOCK_PAYMASTER = "0x6666666666666666666666666666666666666666"
MOCK_TOKEN = "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"
MOCK_WALLET_ADDRESS = "0x7777777777777777777777777777777777777777"
MOCK_GUARDIAN_CONTRACT = "0x8888888888888888888888888888888888888888"
MOCK_ENTRY_POINT = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"

MOCK_CHAIN_ID = 11155111
MOCK_UPGRADE_DELAY = 3600
MOCK_GUARDIAN_DELAY = 7200
MOCK_MAX_FEE_PER_GAS = 20000000000  # 20 Gwei
MOCK_MAX_PRIORITY_FEE_PER_GAS = 1000000000  # 1 Gwei

# Stand-in creation bytecode; only its bytes matter for CREATE2
MOCK_PROXY_BYTECODE = "0x608060405260405161" + "ab" * 16
MOCK_FACTORY_BYTECODE = "0x60806040523480156100" + "cd" * 16

# r = 0x11.., s = 0x22.., v = 0x1b
MOCK_ECDSA_SIGNATURE = "0x" + "11" * 32 + "22" * 32 + "1b"


# ========================================================================
# Artifacts and Config
# ========================================================================

def create_proxy_artifact(bytecode: str = MOCK_PROXY_BYTECODE) -> ContractArtifact:
    """Proxy artifact with the ``constructor(address logic, bytes data)`` ABI."""
    return ContractArtifact(abi=get_wallet_proxy_abi(), bytecode=bytecode)


def create_factory_artifact(bytecode: str = MOCK_FACTORY_BYTECODE) -> ContractArtifact:
    return ContractArtifact(abi=get_wallet_factory_abi(), bytecode=bytecode)


def create_wallet_config(with_factory: bool = True, **overrides) -> WalletConfig:
    """
    Create a WalletConfig backed by the mock artifacts.

    Args:
        with_factory: Include the wallet factory artifact.
        **overrides: Extra WalletConfig fields.
    """
    fields = {"proxy": create_proxy_artifact()}
    if with_factory:
        fields["wallet_factory"] = create_factory_artifact()
    fields.update(overrides)
    return WalletConfig(**fields)


# ========================================================================
# Mock Signature Data
# ========================================================================

def create_ecdsa_signature(address: str, signature: str = MOCK_ECDSA_SIGNATURE) -> GuardianSignature:
    return GuardianSignature(address=address, signature=signature, is_contract_wallet=False)


def create_contract_signature(address: str, payload_length: int = 40, fill: str = "cc") -> GuardianSignature:
    """EIP-1271 guardian signature with an arbitrary ``payload_length``-byte payload."""
    return GuardianSignature(
        address=address,
        signature="0x" + fill * payload_length,
        is_contract_wallet=True,
    )


def guardian_info_result(
    current: str,
    following: str,
    activate_time: int,
    delay: int = MOCK_GUARDIAN_DELAY,
) -> list:
    """Decoded ``guardianInfo()`` outputs as web3 returns them."""
    return [
        AsyncWeb3.to_checksum_address(current),
        AsyncWeb3.to_checksum_address(following),
        activate_time,
        delay,
    ]


# ========================================================================
# Mock Web3
# ========================================================================

class MockContract:
    """
    Mock Web3 contract object whose view functions return preset values.

    Each entry of ``call_results`` maps a function name to what
    ``functions.<name>(...).call()`` resolves to; an exception instance is
    raised from the call instead.

    Example:
        contract = MockContract({"nonce": 7})
        await contract.functions.nonce().call()  # 7
        contract.functions.nonce.return_value.call.assert_awaited_once()
    """

    def __init__(self, call_results: Optional[Dict[str, Any]] = None):
        self.functions = Mock()
        for name, result in (call_results or {}).items():
            fn = Mock()
            if isinstance(result, Exception):
                fn.call = AsyncMock(side_effect=result)
            else:
                fn.call = AsyncMock(return_value=result)
            setattr(self.functions, name, Mock(return_value=fn))


class MockWeb3Provider:
    """
    Mock AsyncWeb3 exposing ``eth.contract`` and ``eth.get_code``.

    Every ``eth.contract(...)`` returns the same ``MockContract`` built from
    ``call_results``; it is also reachable as ``self.contract``.

    Example:
        w3 = MockWeb3Provider(call_results={"nonce": 7}, code=b"\\x60\\x80")
        await WalletLib.get_nonce(w3, wallet)
        w3.eth.contract.assert_called_once()
    """

    def __init__(self, call_results: Optional[Dict[str, Any]] = None, code: bytes = b""):
        self.contract = MockContract(call_results)
        self.eth = Mock()
        self.eth.contract = Mock(return_value=self.contract)
        self.eth.get_code = AsyncMock(return_value=code)
