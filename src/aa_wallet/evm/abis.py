"""
Wallet, Guardian and Factory Contract ABI Module

Simplified ABI definitions for the contracts the SDK talks to.  Reads go
through ``w3.eth.contract(address=..., abi=...)``; calldata and init code
that are only packed, never sent, are encoded with an offline ``Web3``
contract class.

Usage:
    from aa_wallet.evm.abis import get_wallet_abi, encode_function_call

    contract = w3.eth.contract(address=wallet, abi=get_wallet_abi())
    nonce = await contract.functions.nonce().call()

    calldata = encode_function_call(get_wallet_abi(), "setGuardian", [new_guardian])
"""

from typing import Any, Dict, List, Sequence

from eth_utils import to_bytes
from web3 import Web3

from ..exceptions import ConfigurationError


def get_wallet_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the wallet logic contract.

    Covers ``initialize``, ``setGuardian``, ``transferOwner``,
    ``guardianInfo`` and ``nonce``.

    Returns:
        List[Dict[str, Any]]: Wallet logic ABI
    """
    return [
        {
            "name": "initialize",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "anEntryPoint", "type": "address"},
                {"name": "anOwner", "type": "address"},
                {"name": "upgradeDelay", "type": "uint32"},
                {"name": "guardianDelay", "type": "uint32"},
                {"name": "guardian", "type": "address"},
            ],
            "outputs": [],
        },
        {
            "name": "setGuardian",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [{"name": "newGuardian", "type": "address"}],
            "outputs": [],
        },
        {
            "name": "transferOwner",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [{"name": "newOwner", "type": "address"}],
            "outputs": [],
        },
        {
            "name": "guardianInfo",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [
                {"name": "currentGuardian", "type": "address"},
                {"name": "nextGuardian", "type": "address"},
                {"name": "nextGuardianActivateTime", "type": "uint64"},
                {"name": "guardianDelay", "type": "uint32"},
            ],
        },
        {
            "name": "nonce",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "uint256"}],
        },
    ]


def get_guardian_multisig_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the guardian multi-signature logic contract.

    Returns:
        List[Dict[str, Any]]: ABI with ``initialize(address[],uint16)``
    """
    return [
        {
            "name": "initialize",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_guardians", "type": "address[]"},
                {"name": "_threshold", "type": "uint16"},
            ],
            "outputs": [],
        }
    ]


def get_wallet_factory_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the wallet factory contract.

    Returns:
        List[Dict[str, Any]]: ABI with the factory constructor and ``createWallet``
    """
    return [
        {
            "type": "constructor",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_walletImpl", "type": "address"},
                {"name": "_singletonFactory", "type": "address"},
            ],
        },
        {
            "name": "createWallet",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_entryPoint", "type": "address"},
                {"name": "_owner", "type": "address"},
                {"name": "_upgradeDelay", "type": "uint32"},
                {"name": "_guardianDelay", "type": "uint32"},
                {"name": "_guardian", "type": "address"},
                {"name": "_salt", "type": "bytes32"},
            ],
            "outputs": [{"name": "proxy", "type": "address"}],
        },
    ]


def get_singleton_factory_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the EIP-2470 singleton factory.

    Returns:
        List[Dict[str, Any]]: ABI for ``deploy(bytes,bytes32)``
    """
    return [
        {
            "name": "deploy",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_initCode", "type": "bytes"},
                {"name": "_salt", "type": "bytes32"},
            ],
            "outputs": [{"name": "createdContract", "type": "address"}],
        }
    ]


def get_wallet_proxy_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the wallet proxy constructor.

    Returns:
        List[Dict[str, Any]]: ABI with ``constructor(address logic, bytes data)``
    """
    return [
        {
            "type": "constructor",
            "stateMutability": "payable",
            "inputs": [
                {"name": "logic", "type": "address"},
                {"name": "data", "type": "bytes"},
            ],
        }
    ]


def get_token_paymaster_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the token paymaster's exchange-rate views.

    Returns:
        List[Dict[str, Any]]: ABI for ``isSupportedToken`` and ``exchangePrice``
    """
    return [
        {
            "name": "isSupportedToken",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "token", "type": "address"}],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "name": "exchangePrice",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "token", "type": "address"}],
            "outputs": [{"name": "price", "type": "uint256"}],
        },
    ]


# ---------------------------------------------------------------------------
# Offline encoding through web3 contract objects
# ---------------------------------------------------------------------------

# Never sends a request; contract classes built on it only encode.
_encoder = Web3()


def encode_function_call(abi: List[Dict[str, Any]], fn_name: str, args: Sequence[Any] = ()) -> bytes:
    """
    Calldata for ``fn_name(*args)``, selector included.

    Args:
        abi: Contract ABI containing the function.
        fn_name: Function name.
        args: Positional arguments matching the ABI inputs.

    Returns:
        bytes: Calldata ready for ``eth_call`` or a user operation.
    """
    contract = _encoder.eth.contract(abi=abi)
    return to_bytes(hexstr=contract.encode_abi(fn_name, args=list(args)))


def encode_deploy_data(abi: List[Dict[str, Any]], bytecode: str, args: Sequence[Any] = ()) -> bytes:
    """
    Creation bytecode followed by the ABI-encoded constructor arguments.

    Raises:
        ConfigurationError: If arguments are given but the ABI declares no constructor.
    """
    if args and not any(entry.get("type") == "constructor" for entry in abi):
        raise ConfigurationError("ABI has no constructor to encode arguments for")
    contract = _encoder.eth.contract(abi=abi, bytecode=bytecode)
    return to_bytes(hexstr=contract.constructor(*args).data_in_transaction)
