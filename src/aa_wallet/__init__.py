from .evm import (
    WalletConfig,
    ContractArtifact,
    WalletLib,
    Guardian,
    GuardianSignature,
    GuardianState,
    UserOperationModel,
    derive_address,
    normalize_salt,
    pack_guardian_signatures,
    resolve_guardian,
)
from .clients import BundlerClient
from .exceptions import (
    AAWalletError,
    ConfigurationError,
    MissingDeploymentTarget,
    InvalidLengthError,
    DuplicateGuardianAddress,
    GuardianAddressMismatch,
    EmptySignatureSet,
    BlockchainInteractionError,
    InvalidNonce,
    UnsupportedToken,
    BundlerError,
)

__version__ = "0.1.0"

__all__ = [
    "WalletConfig",
    "ContractArtifact",
    "WalletLib",
    "Guardian",
    "GuardianSignature",
    "GuardianState",
    "UserOperationModel",
    "derive_address",
    "normalize_salt",
    "pack_guardian_signatures",
    "resolve_guardian",
    "BundlerClient",
    "AAWalletError",
    "ConfigurationError",
    "MissingDeploymentTarget",
    "InvalidLengthError",
    "DuplicateGuardianAddress",
    "GuardianAddressMismatch",
    "EmptySignatureSet",
    "BlockchainInteractionError",
    "InvalidNonce",
    "UnsupportedToken",
    "BundlerError",
]
