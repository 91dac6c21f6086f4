from .constants import (
    SINGLETON_FACTORY_ADDRESS,
    ENTRY_POINT_V06_ADDRESS,
    ZERO_ADDRESS,
    BYTES32_ZERO,
    SignatureMode,
)
from .schemas import (
    ContractArtifact,
    WalletConfig,
    GuardianSignature,
    GuardianConfig,
    GuardianState,
    GuardianInfo,
    GuardianRotationStatus,
    GuardianDeployment,
    UserOperationModel,
)
from .create2 import (
    compute_create2_address,
    compute_create2_address_with_code_hash,
    derive_address,
)
from .salt import normalize_salt, number_to_bytes32
from .initcode import (
    InitCodePacker,
    build_proxy_init_code,
    build_factory_invocation,
    build_singleton_deploy_invocation,
    encode_wallet_initialize,
    encode_guardian_initialize,
)
from .signatures import (
    pack_guardian_signatures,
    sort_guardian_signatures,
    encode_signature,
    decode_signature,
    pack_guardians_sign_by_init_code,
    sign_user_op_hash,
    build_guardian_signature,
)
from .guardian import Guardian, resolve_guardian, rotation_status, fetch_guardian_state
from .wallet import WalletLib

__all__ = [
    "SINGLETON_FACTORY_ADDRESS",
    "ENTRY_POINT_V06_ADDRESS",
    "ZERO_ADDRESS",
    "BYTES32_ZERO",
    "SignatureMode",
    "ContractArtifact",
    "WalletConfig",
    "GuardianSignature",
    "GuardianConfig",
    "GuardianState",
    "GuardianInfo",
    "GuardianRotationStatus",
    "GuardianDeployment",
    "UserOperationModel",
    "compute_create2_address",
    "compute_create2_address_with_code_hash",
    "derive_address",
    "normalize_salt",
    "number_to_bytes32",
    "InitCodePacker",
    "build_proxy_init_code",
    "build_factory_invocation",
    "build_singleton_deploy_invocation",
    "encode_wallet_initialize",
    "encode_guardian_initialize",
    "pack_guardian_signatures",
    "sort_guardian_signatures",
    "encode_signature",
    "decode_signature",
    "pack_guardians_sign_by_init_code",
    "sign_user_op_hash",
    "build_guardian_signature",
    "Guardian",
    "resolve_guardian",
    "rotation_status",
    "fetch_guardian_state",
    "WalletLib",
]
