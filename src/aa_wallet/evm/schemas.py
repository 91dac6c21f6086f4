"""
EVM Wallet Schema Models

Pydantic models for wallet configuration, guardian signatures, guardian
state and ERC-4337 user operations.  All classes inherit from the base
schema hierarchy in ``schemas.bases``.

Configuration classes:
    - ContractArtifact: ABI + creation bytecode of a deployable contract.
    - WalletConfig: Singleton factory and artifacts used by the facades.

Guardian classes:
    - GuardianSignature: One guardian's ECDSA or EIP-1271 signature.
    - GuardianConfig: Unique, sorted guardian set plus threshold.
    - GuardianState: Point-in-time read of ``guardianInfo()``.
    - GuardianInfo: GuardianState resolved against a timestamp.
    - GuardianDeployment: Guardian contract address and deploy payload.

User operation classes:
    - UserOperationModel: EIP-4337 v0.6 UserOperation with hashing helpers.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import dotenv
from eth_abi import encode
from eth_utils import keccak
from pydantic import ConfigDict, Field, field_validator, model_validator

from ..exceptions import ConfigurationError
from ..schemas.bases import BaseContractState, BaseSignature, CanonicalModel
from .constants import (
    ECDSA_SIGNATURE_LENGTH,
    ENV_FACTORY_ARTIFACT,
    ENV_GUARDIAN_PROXY_ARTIFACT,
    ENV_PROXY_ARTIFACT,
    SINGLETON_FACTORY_ADDRESS,
    get_artifact_path_from_env,
    get_singleton_factory_from_env,
)
from .utils import bytes_to_hex, hex_to_bytes, sort_unique_addresses, to_address


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ContractArtifact(CanonicalModel):
    """
    ABI and creation bytecode of a deployable contract.

    ``bytecode`` accepts either a hex string (Hardhat artifacts) or a mapping
    with an ``object`` key (Foundry artifacts).  Both fields are required and
    rejected at construction when empty or malformed.

    Attributes:
        abi: Contract ABI; must declare a constructor for proxy artifacts.
        bytecode: 0x-prefixed lowercase creation bytecode.

    Example::

        proxy = ContractArtifact(abi=get_wallet_proxy_abi(), bytecode="0x6080...")
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    abi: List[Dict[str, Any]] = Field(..., min_length=1, description="Contract ABI")
    bytecode: str = Field(..., description="Creation bytecode (0x-prefixed hex)")

    @field_validator("bytecode", mode="before")
    @classmethod
    def _normalize_bytecode(cls, value: Any) -> Any:
        if isinstance(value, dict):
            value = value.get("object")
        if not isinstance(value, str):
            raise ValueError("bytecode must be a hex string or a mapping with an 'object' key")
        raw = hex_to_bytes(value)
        if not raw:
            raise ValueError("bytecode must not be empty")
        return bytes_to_hex(raw)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "ContractArtifact":
        """
        Load a Hardhat or Foundry JSON artifact.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load contract artifact {path}: {e}") from e
        return cls(abi=data.get("abi"), bytecode=data.get("bytecode"))


class WalletConfig(CanonicalModel):
    """
    Explicit configuration handed to ``WalletLib`` and ``Guardian``.

    Nothing is read from process-wide state once a config exists, so several
    configs (one per chain or per factory deployment) can be used side by side.

    Attributes:
        singleton_factory: CREATE2 deployer used for wallets and guardians.
        proxy: Wallet proxy artifact (constructor ``(address logic, bytes data)``).
        guardian_proxy: Proxy artifact for guardian contracts; defaults to ``proxy``.
        wallet_factory: Optional wallet factory artifact, needed only to derive
            a factory address from a wallet logic address.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    singleton_factory: str = Field(default=SINGLETON_FACTORY_ADDRESS, description="Singleton factory address")
    proxy: ContractArtifact = Field(..., description="Wallet proxy artifact")
    guardian_proxy: Optional[ContractArtifact] = Field(None, description="Guardian proxy artifact")
    wallet_factory: Optional[ContractArtifact] = Field(None, description="Wallet factory artifact")

    @field_validator("singleton_factory")
    @classmethod
    def _checksum_factory(cls, value: str) -> str:
        return to_address(value)

    @property
    def guardian_proxy_artifact(self) -> ContractArtifact:
        return self.guardian_proxy or self.proxy

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "WalletConfig":
        """
        Build a config from environment variables (a ``.env`` file is loaded first).

        Environment Variables:
            - AA_WALLET_PROXY_ARTIFACT: path to the proxy artifact (required)
            - AA_WALLET_GUARDIAN_PROXY_ARTIFACT: guardian proxy artifact (optional)
            - AA_WALLET_FACTORY_ARTIFACT: wallet factory artifact (optional)
            - AA_WALLET_SINGLETON_FACTORY: singleton factory override (optional)

        Raises:
            ConfigurationError: If the proxy artifact path is not set or unreadable.
        """
        dotenv.load_dotenv(dotenv_path)

        proxy_path = get_artifact_path_from_env(ENV_PROXY_ARTIFACT)
        if not proxy_path:
            raise ConfigurationError(f"{ENV_PROXY_ARTIFACT} is not set")

        optional: Dict[str, ContractArtifact] = {}
        for field_name, env_name in (
            ("guardian_proxy", ENV_GUARDIAN_PROXY_ARTIFACT),
            ("wallet_factory", ENV_FACTORY_ARTIFACT),
        ):
            path = get_artifact_path_from_env(env_name)
            if path:
                optional[field_name] = ContractArtifact.from_json_file(path)

        return cls(
            singleton_factory=get_singleton_factory_from_env() or SINGLETON_FACTORY_ADDRESS,
            proxy=ContractArtifact.from_json_file(proxy_path),
            **optional,
        )


# ---------------------------------------------------------------------------
# Guardian signatures
# ---------------------------------------------------------------------------

class GuardianSignature(BaseSignature):
    """
    One guardian's signature over a user operation hash.

    * ``"ECDSA"``   -- a plain 65-byte ``r || s || v`` signature.
    * ``"EIP1271"`` -- a contract-wallet guardian; ``signature`` is an
      arbitrary-length payload checked by the guardian contract's own
      ``isValidSignature``.

    ``signature_type`` is inferred from ``is_contract_wallet`` (wire alias
    ``contract``) when omitted.

    Attributes:
        address: Guardian address (any valid casing).
        signature: Hex payload, 0x prefix optional.
        is_contract_wallet: True for EIP-1271 signatures.

    Example::

        sig = GuardianSignature(address="0x1111...1111", signature="0x" + "11" * 65)
        sig = GuardianSignature.model_validate(
            {"address": "0x2222...2222", "signature": "0xdeadbeef", "contract": True}
        )
    """

    signature_type: Literal["ECDSA", "EIP1271"] = Field(..., description="'ECDSA' or 'EIP1271'")
    address: str = Field(..., description="Guardian (signer) address")
    signature: str = Field(..., description="Signature payload (hex)")
    is_contract_wallet: bool = Field(default=False, alias="contract", description="EIP-1271 contract signature")

    @model_validator(mode="before")
    @classmethod
    def _infer_signature_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and "signature_type" not in data:
            contract = data.get("is_contract_wallet", data.get("contract", False))
            data = {**data, "signature_type": "EIP1271" if contract else "ECDSA"}
        return data

    @model_validator(mode="after")
    def _check_format(self) -> "GuardianSignature":
        self.validate_format()
        return self

    @property
    def signature_bytes(self) -> bytes:
        return hex_to_bytes(self.signature)

    def validate_format(self) -> bool:
        """
        Validate address, payload encoding and ECDSA length.

        Returns:
            True when all checks pass.

        Raises:
            ValueError: Descriptive message on the first failed check.
        """
        to_address(self.address)
        if self.is_contract_wallet != (self.signature_type == "EIP1271"):
            raise ValueError(
                f"signature_type {self.signature_type!r} contradicts is_contract_wallet={self.is_contract_wallet}"
            )
        payload = self.signature_bytes
        if not self.is_contract_wallet and len(payload) != ECDSA_SIGNATURE_LENGTH:
            raise ValueError(
                f"ECDSA signature must be {ECDSA_SIGNATURE_LENGTH} bytes, got {len(payload)}"
            )
        return True


class GuardianConfig(CanonicalModel):
    """
    Guardian set and approval threshold.

    ``guardians`` is stored sorted ascending by numeric address value: the
    guardian contract's initializer is order-sensitive, so the same set must
    encode identically whatever order the caller supplied.

    Raises:
        DuplicateGuardianAddress: If two guardians share an address.
        pydantic.ValidationError: If the threshold is out of range.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    guardians: List[str] = Field(..., min_length=1, description="Guardian addresses, sorted ascending")
    threshold: int = Field(..., ge=1, le=2 ** 16 - 1, description="Signatures required (uint16)")

    @field_validator("guardians")
    @classmethod
    def _sort_guardians(cls, value: List[str]) -> List[str]:
        return sort_unique_addresses(value)

    @model_validator(mode="after")
    def _check_threshold(self) -> "GuardianConfig":
        if self.threshold > len(self.guardians):
            raise ValueError(
                f"threshold {self.threshold} exceeds guardian count {len(self.guardians)}"
            )
        return self


# ---------------------------------------------------------------------------
# Guardian state
# ---------------------------------------------------------------------------

class GuardianRotationStatus(str, Enum):
    """
    Read-time status of a guardian rotation.

    Attributes:
        STABLE: No rotation scheduled.
        PENDING: Rotation scheduled, activation time not reached.
        ACTIVATED: Activation time reached; the next guardian is in effect.
    """
    STABLE = "stable"
    PENDING = "pending"
    ACTIVATED = "activated"


class GuardianState(BaseContractState):
    """
    Guardian slot of a wallet as returned by ``guardianInfo()``.

    Attributes:
        current_guardian: Guardian recorded as current on-chain.
        next_guardian: Scheduled replacement (zero address when none).
        next_guardian_activate_time: Unix seconds; ``0`` means nothing pending.
        guardian_delay: Delay applied to future rotations, in seconds.
    """

    current_guardian: str = Field(..., description="Current guardian address")
    next_guardian: str = Field(..., description="Pending guardian address")
    next_guardian_activate_time: int = Field(..., ge=0, description="Activation time (unix seconds)")
    guardian_delay: int = Field(..., ge=0, description="Guardian rotation delay (seconds)")

    @field_validator("current_guardian", "next_guardian")
    @classmethod
    def _checksum(cls, value: str) -> str:
        return to_address(value)


class GuardianInfo(BaseContractState):
    """
    GuardianState resolved at ``resolved_at``.

    Attributes:
        state: Raw on-chain guardian state.
        effective_guardian: Guardian in force at ``resolved_at``.
        status: Rotation status at ``resolved_at``.
        resolved_at: Unix timestamp used for resolution.
    """

    state: GuardianState
    effective_guardian: str
    status: GuardianRotationStatus
    resolved_at: int = Field(..., ge=0)


class GuardianDeployment(CanonicalModel):
    """
    Counterfactual guardian contract.

    Attributes:
        address: CREATE2 address of the guardian proxy.
        init_code: Singleton-factory ``deploy`` invocation (factory ++ calldata).
        salt: Normalized salt used for both.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    address: str
    init_code: str
    salt: str


# ---------------------------------------------------------------------------
# User operations
# ---------------------------------------------------------------------------

def _parse_numeric(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not a numeric value")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2] in ("0x", "0X"):
            return int(text, 16)
        return int(text, 10)
    raise ValueError(f"not a numeric value: {value!r}")


class UserOperationModel(CanonicalModel):
    """
    EIP-4337 (EntryPoint v0.6) ``UserOperation``.

    Numeric fields accept ints or numeric strings (decimal or 0x-hex).  The
    model is frozen: builders fill every field at construction and the
    aggregated ``signature`` is attached last with :meth:`with_signature`.

    Attributes mirror the canonical EIP-4337 fields: ``sender``, ``nonce``,
    ``initCode``, ``callData``, gas fields, fee fields, ``paymasterAndData``
    and the ``signature`` blob.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sender: str = Field(..., description="Account sending the user operation")
    nonce: int = Field(..., ge=0, description="Nonce to prevent replay")
    initCode: str = Field(default="0x", description="Initialization code for account creation (hex)")
    callData: str = Field(default="0x", description="Call data payload for the operation (hex)")
    callGasLimit: int = Field(default=0, ge=0, description="Gas limit for the inner call")
    verificationGasLimit: int = Field(default=0, ge=0, description="Gas limit for verification")
    preVerificationGas: int = Field(default=0, ge=0, description="Gas used prior to verification")
    maxFeePerGas: int = Field(default=0, ge=0, description="Max fee per gas user will pay")
    maxPriorityFeePerGas: int = Field(default=0, ge=0, description="Max priority fee per gas")
    paymasterAndData: str = Field(default="0x", description="Paymaster address and optional data (hex)")
    signature: str = Field(default="0x", description="Signature over the user operation (hex)")

    @field_validator("sender")
    @classmethod
    def _checksum_sender(cls, value: str) -> str:
        return to_address(value)

    @field_validator(
        "nonce", "callGasLimit", "verificationGasLimit", "preVerificationGas",
        "maxFeePerGas", "maxPriorityFeePerGas",
        mode="before",
    )
    @classmethod
    def _numeric_like(cls, value: Any) -> int:
        return _parse_numeric(value)

    @field_validator("initCode", "callData", "paymasterAndData", "signature")
    @classmethod
    def _hex_field(cls, value: str) -> str:
        return bytes_to_hex(hex_to_bytes(value))

    def with_signature(self, signature: str) -> "UserOperationModel":
        """Return a copy carrying ``signature``; the original is unchanged."""
        return self.model_validate({**self.model_dump(), "signature": signature})

    def pack(self) -> bytes:
        """
        ABI-encode the operation without its signature, hashing the dynamic
        fields, as EntryPoint v0.6 does before computing ``userOpHash``.
        """
        return encode(
            ["address", "uint256", "bytes32", "bytes32", "uint256", "uint256",
             "uint256", "uint256", "uint256", "bytes32"],
            [
                self.sender,
                self.nonce,
                keccak(hex_to_bytes(self.initCode)),
                keccak(hex_to_bytes(self.callData)),
                self.callGasLimit,
                self.verificationGasLimit,
                self.preVerificationGas,
                self.maxFeePerGas,
                self.maxPriorityFeePerGas,
                keccak(hex_to_bytes(self.paymasterAndData)),
            ],
        )

    def get_user_op_hash(self, entry_point: str, chain_id: int) -> str:
        """
        ``keccak256(abi.encode(keccak256(pack(op)), entryPoint, chainId))``.

        Returns:
            str: 0x-prefixed 32-byte hash that owners and guardians sign.
        """
        digest = keccak(
            encode(
                ["bytes32", "address", "uint256"],
                [keccak(self.pack()), to_address(entry_point), chain_id],
            )
        )
        return bytes_to_hex(digest)

    def to_rpc_dict(self) -> Dict[str, Any]:
        """JSON-RPC form: numeric fields as 0x-hex quantities."""
        data = self.model_dump()
        for key in ("nonce", "callGasLimit", "verificationGasLimit", "preVerificationGas",
                    "maxFeePerGas", "maxPriorityFeePerGas"):
            data[key] = hex(data[key])
        return data
