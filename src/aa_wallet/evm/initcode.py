"""
Init-Code Packing

Builds the byte payloads that deploy a wallet or guardian contract:

build_proxy_init_code
    Proxy creation bytecode followed by the ABI-encoded constructor
    arguments ``(logic, initializeCalldata)``.

build_factory_invocation
    ``walletFactory || createWallet(...)`` calldata, the ``initCode`` of a
    first-time user operation.

build_singleton_deploy_invocation
    ``singletonFactory || deploy(initCode, salt)`` calldata, used to deploy
    guardian contracts through the singleton factory.

``InitCodePacker`` binds these helpers to the proxy artifacts and singleton
factory of a ``WalletConfig``.
"""

from typing import Any, Optional, Sequence

from eth_utils import keccak

from ..exceptions import MissingDeploymentTarget
from .abis import (
    encode_deploy_data,
    encode_function_call,
    get_guardian_multisig_abi,
    get_singleton_factory_abi,
    get_wallet_abi,
    get_wallet_factory_abi,
)
from .constants import BYTES32_ZERO
from .create2 import derive_address
from .salt import number_to_bytes32
from .schemas import ContractArtifact, GuardianConfig, WalletConfig
from .utils import bytes_to_hex, hex_to_bytes, to_address


def build_proxy_init_code(logic_address: str, initialize_calldata: bytes, proxy: ContractArtifact) -> str:
    """
    Deployment bytecode of a proxy pointing at ``logic_address``.

    The proxy artifact is deployed with constructor arguments
    ``(logic, initialize_calldata)``, typed by its ABI.

    Args:
        logic_address: Logic (implementation) contract address.
        initialize_calldata: Encoded ``initialize(...)`` call run by the proxy constructor.
        proxy: Proxy artifact.

    Returns:
        str: 0x-prefixed init code.

    Raises:
        ConfigurationError: If the proxy ABI declares no constructor.
    """
    return bytes_to_hex(
        encode_deploy_data(proxy.abi, proxy.bytecode, [to_address(logic_address), bytes(initialize_calldata)])
    )


def encode_wallet_initialize(
    entry_point: str,
    owner: str,
    upgrade_delay: int,
    guardian_delay: int,
    guardian: str,
) -> bytes:
    """``initialize(entryPoint, owner, upgradeDelay, guardianDelay, guardian)`` calldata."""
    return encode_function_call(
        get_wallet_abi(),
        "initialize",
        [to_address(entry_point), to_address(owner), upgrade_delay, guardian_delay, to_address(guardian)],
    )


def encode_guardian_initialize(guardians: Sequence[str], threshold: int) -> bytes:
    """
    ``initialize(address[] guardians, uint16 threshold)`` calldata.

    The guardian set is validated and sorted ascending through
    ``GuardianConfig``; the caller's sequence is left untouched.

    Raises:
        DuplicateGuardianAddress: If two guardians share an address.
    """
    config = GuardianConfig(guardians=list(guardians), threshold=threshold)
    return encode_function_call(get_guardian_multisig_abi(), "initialize", [config.guardians, config.threshold])


def build_factory_invocation(
    factory_address: str,
    entry_point: str,
    owner: str,
    upgrade_delay: int,
    guardian_delay: int,
    guardian: str,
    salt: Optional[int] = None,
) -> str:
    """
    ``factory.lower() || createWallet(...)`` with the numeric salt padded to bytes32.

    Returns:
        str: Lower-case factory address followed by the calldata (one hex string).
    """
    calldata = encode_function_call(
        get_wallet_factory_abi(),
        "createWallet",
        [
            to_address(entry_point),
            to_address(owner),
            upgrade_delay,
            guardian_delay,
            to_address(guardian),
            hex_to_bytes(number_to_bytes32(salt)),
        ],
    )
    return to_address(factory_address).lower() + calldata.hex()


def build_singleton_deploy_invocation(singleton_factory: str, init_code: str, salt: str) -> str:
    """
    ``singletonFactory.lower() || deploy(initCode, salt)``.

    Args:
        singleton_factory: Singleton factory address.
        init_code: Contract init code.
        salt: Normalized 32-byte salt.
    """
    calldata = encode_function_call(
        get_singleton_factory_abi(),
        "deploy",
        [hex_to_bytes(init_code), hex_to_bytes(salt)],
    )
    return to_address(singleton_factory).lower() + calldata.hex()


class InitCodePacker:
    """
    Init-code builder bound to a ``WalletConfig``.

    Example::

        packer = InitCodePacker(config)
        code = packer.wallet_init_code(logic, entry_point, owner, 3600, 3600, guardian)
        address = derive_address(config.singleton_factory, normalize_salt(0), code)
    """

    def __init__(self, config: WalletConfig):
        self._config = config

    @property
    def config(self) -> WalletConfig:
        return self._config

    def wallet_init_code(
        self,
        wallet_logic: str,
        entry_point: str,
        owner: str,
        upgrade_delay: int,
        guardian_delay: int,
        guardian: str,
    ) -> str:
        initialize = encode_wallet_initialize(entry_point, owner, upgrade_delay, guardian_delay, guardian)
        return build_proxy_init_code(wallet_logic, initialize, self._config.proxy)

    def guardian_init_code(self, guardian_logic: str, guardians: Sequence[str], threshold: int) -> str:
        initialize = encode_guardian_initialize(guardians, threshold)
        return build_proxy_init_code(guardian_logic, initialize, self._config.guardian_proxy_artifact)

    def artifact_init_code(self, artifact: ContractArtifact, init_args: Optional[Sequence[Any]] = None) -> str:
        """Init code of an arbitrary artifact with its constructor arguments."""
        if not init_args:
            return artifact.bytecode
        return bytes_to_hex(encode_deploy_data(artifact.abi, artifact.bytecode, list(init_args)))

    def singleton_deploy_invocation(self, init_code: str, salt: str) -> str:
        return build_singleton_deploy_invocation(self._config.singleton_factory, init_code, salt)

    def wallet_factory_address(self, wallet_logic: str) -> str:
        """
        Address of the wallet factory for ``wallet_logic``.

        The factory is itself deployed through the singleton factory with the
        zero salt and constructor arguments ``(wallet_logic, singleton_factory)``.

        Raises:
            MissingDeploymentTarget: If no wallet factory artifact is configured.
        """
        artifact = self._config.wallet_factory
        if artifact is None:
            raise MissingDeploymentTarget(
                "cannot derive a wallet factory address: no wallet factory artifact configured"
            )
        init_code = self.artifact_init_code(
            artifact, [to_address(wallet_logic), self._config.singleton_factory]
        )
        return derive_address(self._config.singleton_factory, BYTES32_ZERO, init_code)

    def resolve_wallet_factory(self, wallet_factory: Optional[str], wallet_logic: Optional[str]) -> str:
        """
        Explicit factory address if given, else one derived from ``wallet_logic``.

        Raises:
            MissingDeploymentTarget: If neither is available.
        """
        if wallet_factory:
            return to_address(wallet_factory)
        if not wallet_logic:
            raise MissingDeploymentTarget("wallet factory address and wallet logic address are both undefined")
        return self.wallet_factory_address(wallet_logic)

    def factory_invocation(
        self,
        wallet_factory: Optional[str],
        wallet_logic: Optional[str],
        entry_point: str,
        owner: str,
        upgrade_delay: int,
        guardian_delay: int,
        guardian: str,
        salt: Optional[int] = None,
    ) -> str:
        factory = self.resolve_wallet_factory(wallet_factory, wallet_logic)
        return build_factory_invocation(factory, entry_point, owner, upgrade_delay, guardian_delay, guardian, salt)

    @staticmethod
    def init_code_hash(init_code: str) -> str:
        return bytes_to_hex(keccak(hex_to_bytes(init_code)))
