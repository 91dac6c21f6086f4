"""
Exception and Error Definitions Module

Defines the exception hierarchy for address derivation, init-code packing,
guardian signature aggregation and the on-chain reads made by the wallet
facades. All exceptions inherit from AAWalletError for unified exception
handling.

Exception Hierarchy:
    AAWalletError (root)
    ├── ConfigurationError
    │   └── MissingDeploymentTarget
    ├── InvalidLengthError (also a ValueError)
    ├── GuardianError
    │   ├── DuplicateGuardianAddress
    │   └── GuardianAddressMismatch
    ├── SignatureError
    │   └── EmptySignatureSet
    └── BlockchainInteractionError
        ├── InvalidNonce
        ├── UnsupportedToken
        └── BundlerError
"""

from typing import Any, Optional


class AAWalletError(Exception):
    """
    Root exception class for all project-specific exceptions.

    Every precondition violation surfaces as a subclass of this error.
    Nothing in the package retries or recovers from these internally.
    """
    pass


class ConfigurationError(AAWalletError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Contract artifact without ABI or bytecode
    - Proxy ABI without a constructor definition
    - Required environment variable not set
    """
    pass


class MissingDeploymentTarget(ConfigurationError):
    """
    Raised when neither an explicit factory address nor a derivable one is
    available.

    A factory address can only be derived from a known wallet logic address
    when a wallet factory artifact is configured.
    """
    pass


class InvalidLengthError(AAWalletError, ValueError):
    """
    Raised when a fixed-size byte value has the wrong length.

    Examples: a 19-byte factory address, a 31-byte salt, an ECDSA signature
    that is not 65 bytes.
    """
    pass


class GuardianError(AAWalletError):
    """
    Base exception for guardian set and guardian contract errors.
    """
    pass


class DuplicateGuardianAddress(GuardianError):
    """
    Raised when two guardians (or two signers) share the same address.

    Addresses are compared as unsigned integers, so ``0xAbC...`` and
    ``0xabc...`` are the same guardian.

    Attributes:
        address: The duplicated address as supplied by the caller
    """

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"guardian address is duplicated: {address}")


class GuardianAddressMismatch(GuardianError):
    """
    Raised when a caller-asserted guardian contract address differs from the
    address derived from {logic, guardians, threshold, salt}.

    Attributes:
        expected: Address asserted by the caller
        calculated: Address derived locally
    """

    def __init__(self, expected: str, calculated: str):
        self.expected = expected
        self.calculated = calculated
        super().__init__(
            f"guardian address {expected} is not equal to the calculated guardian address {calculated}"
        )


class SignatureError(AAWalletError):
    """
    Base exception for signature aggregation and envelope encoding errors.
    """
    pass


class EmptySignatureSet(SignatureError):
    """
    Raised when signature aggregation is called with zero signatures.
    """
    pass


class BlockchainInteractionError(AAWalletError):
    """
    Raised when blockchain interaction (RPC call) fails or returns data
    that cannot be decoded.

    Attributes:
        rpc_method: RPC method that was called (e.g., 'eth_call')
    """

    def __init__(self, message: str, rpc_method: Optional[str] = None):
        self.rpc_method = rpc_method
        super().__init__(message)


class InvalidNonce(BlockchainInteractionError):
    """
    Raised when the on-chain ``nonce()`` value cannot be parsed as a
    non-negative integer.
    """
    pass


class UnsupportedToken(BlockchainInteractionError):
    """
    Raised when a paymaster exchange-price query is made for a token the
    paymaster does not support.

    Attributes:
        token: Token contract address
        paymaster: Paymaster contract address
    """

    def __init__(self, token: str, paymaster: str):
        self.token = token
        self.paymaster = paymaster
        super().__init__(f"token {token} is not supported by paymaster {paymaster}", rpc_method="eth_call")


class BundlerError(BlockchainInteractionError):
    """
    Raised when a bundler JSON-RPC call returns an ``error`` object.

    Attributes:
        code: JSON-RPC error code
        data: Optional error data returned by the bundler
    """

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None, rpc_method: Optional[str] = None):
        self.code = code
        self.data = data
        super().__init__(message, rpc_method=rpc_method)
