"""
Guardian Contract Helpers

Guardian address calculation, guardian-signed envelopes, the guardian
rotation read model and the user operations that change a wallet's guardian
or owner.

Rotation read model
-------------------
A wallet stores ``(currentGuardian, nextGuardian, activateTime, delay)``.
Which guardian is in force is decided at read time and never written back:

    activateTime == 0             -> STABLE,    current guardian
    now <  activateTime           -> PENDING,   current guardian
    0 < activateTime <= now       -> ACTIVATED, next guardian
"""

import logging
import time
from typing import Iterable, Optional, Sequence, Union

from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput

from ..exceptions import BlockchainInteractionError, GuardianAddressMismatch
from .abis import encode_function_call, get_wallet_abi
from .constants import ZERO_ADDRESS
from .create2 import derive_address
from .initcode import InitCodePacker
from .salt import normalize_salt
from .schemas import (
    GuardianDeployment,
    GuardianInfo,
    GuardianRotationStatus,
    GuardianSignature,
    GuardianState,
    UserOperationModel,
    WalletConfig,
)
from .signatures import pack_guardians_sign_by_init_code
from .utils import bytes_to_hex, to_address

logger = logging.getLogger(__name__)


def rotation_status(state: GuardianState, now: int) -> GuardianRotationStatus:
    activate_time = state.next_guardian_activate_time
    if activate_time == 0:
        return GuardianRotationStatus.STABLE
    if now < activate_time:
        return GuardianRotationStatus.PENDING
    return GuardianRotationStatus.ACTIVATED


def resolve_guardian(state: GuardianState, now: int) -> str:
    """
    Guardian in force at ``now``.

    The activation boundary is inclusive: at ``now == activate_time`` the
    next guardian is already effective.

    Args:
        state: On-chain guardian state.
        now: Unix timestamp in seconds.

    Returns:
        str: Checksummed guardian address.
    """
    if rotation_status(state, now) is GuardianRotationStatus.ACTIVATED:
        return state.next_guardian
    return state.current_guardian


def resolve_guardian_info(state: GuardianState, now: int) -> GuardianInfo:
    return GuardianInfo(
        state=state,
        effective_guardian=resolve_guardian(state, now),
        status=rotation_status(state, now),
        resolved_at=now,
    )


async def fetch_guardian_state(w3: AsyncWeb3, wallet_address: str) -> GuardianState:
    """
    Read ``guardianInfo()`` from a wallet.

    Raises:
        BlockchainInteractionError: If the return data cannot be decoded.
    """
    contract = w3.eth.contract(address=to_address(wallet_address), abi=get_wallet_abi())
    try:
        current, following, activate_time, delay = await contract.functions.guardianInfo().call(
            {"from": ZERO_ADDRESS}
        )
    except BadFunctionCallOutput as e:
        raise BlockchainInteractionError(
            f"cannot decode guardianInfo() of {wallet_address}: {e}", rpc_method="eth_call"
        ) from e
    logger.debug(
        "guardianInfo(%s): current=%s next=%s activateTime=%s delay=%s",
        wallet_address, current, following, activate_time, delay,
    )
    return GuardianState(
        current_guardian=current,
        next_guardian=following,
        next_guardian_activate_time=activate_time,
        guardian_delay=delay,
    )


class Guardian:
    """
    Guardian operations bound to a ``WalletConfig``.

    Example::

        guardian = Guardian(config)
        deployment = guardian.calculate_guardian_and_init_code(
            guardian_logic, [g1, g2, g3], threshold=2, salt="my-recovery-set"
        )
        envelope = guardian.pack_guardians_sign(
            0, 0, collected_signatures, guardian_logic, [g1, g2, g3], 2,
            "my-recovery-set", guardian_address=deployment.address,
        )
    """

    def __init__(self, config: WalletConfig):
        self._config = config
        self._packer = InitCodePacker(config)

    # ------------------------------------------------------------------
    # Address calculation
    # ------------------------------------------------------------------

    def calculate_guardian_and_init_code(
        self,
        guardian_logic: str,
        guardians: Sequence[str],
        threshold: int,
        salt: Union[int, str, bytes, None],
    ) -> GuardianDeployment:
        """
        Guardian contract address and the payload that deploys it.

        Args:
            guardian_logic: Guardian logic contract address.
            guardians: Guardian addresses in any order.
            threshold: Signatures required.
            salt: Any salt accepted by ``normalize_salt``.

        Returns:
            GuardianDeployment: address, singleton-factory init code and salt.

        Raises:
            DuplicateGuardianAddress: If two guardians share an address.
        """
        normalized_salt = normalize_salt(salt)
        init_code_with_args = self._packer.guardian_init_code(guardian_logic, guardians, threshold)
        address = derive_address(self._config.singleton_factory, normalized_salt, init_code_with_args)
        init_code = self._packer.singleton_deploy_invocation(init_code_with_args, normalized_salt)
        return GuardianDeployment(address=address, init_code=init_code, salt=normalized_salt)

    # ------------------------------------------------------------------
    # Signature envelopes
    # ------------------------------------------------------------------

    def pack_guardians_sign(
        self,
        valid_after: int,
        valid_until: int,
        signatures: Iterable[GuardianSignature],
        guardian_logic: str,
        guardians: Sequence[str],
        threshold: int,
        salt: Union[int, str, bytes, None],
        guardian_address: Optional[str] = None,
    ) -> str:
        """
        Guardian-signed envelope including the guardian deploy payload.

        Raises:
            GuardianAddressMismatch: If ``guardian_address`` is given and differs
                from the calculated guardian address.
        """
        deployment = self.calculate_guardian_and_init_code(guardian_logic, guardians, threshold, salt)
        if guardian_address and guardian_address.lower() != deployment.address.lower():
            raise GuardianAddressMismatch(guardian_address, deployment.address)
        return pack_guardians_sign_by_init_code(
            deployment.address, signatures, deployment.init_code, valid_after, valid_until
        )

    @staticmethod
    def pack_guardians_sign_by_init_code(
        guardian_address: str,
        signatures: Iterable[GuardianSignature],
        init_code: str = "0x",
        valid_after: int = 0,
        valid_until: int = 0,
    ) -> str:
        return pack_guardians_sign_by_init_code(guardian_address, signatures, init_code, valid_after, valid_until)

    # ------------------------------------------------------------------
    # On-chain state
    # ------------------------------------------------------------------

    async def get_guardian(self, w3: AsyncWeb3, wallet_address: str, now: int = 0) -> GuardianInfo:
        """
        Read and resolve a wallet's guardian.

        Args:
            w3: AsyncWeb3 instance connected to the wallet's chain.
            wallet_address: Wallet address.
            now: Unix timestamp; ``0`` uses the current wall-clock time.
        """
        state = await fetch_guardian_state(w3, wallet_address)
        ts_now = now if now > 0 else int(time.time())
        return resolve_guardian_info(state, ts_now)

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    @staticmethod
    def _guardian_op(
        wallet_address: str,
        nonce: Union[int, str],
        paymaster_and_data: str,
        max_fee_per_gas: Union[int, str],
        max_priority_fee_per_gas: Union[int, str],
        call_data: bytes,
    ) -> UserOperationModel:
        return UserOperationModel(
            sender=wallet_address,
            nonce=nonce,
            callData=bytes_to_hex(call_data),
            maxFeePerGas=max_fee_per_gas,
            maxPriorityFeePerGas=max_priority_fee_per_gas,
            paymasterAndData=paymaster_and_data or "0x",
        )

    def set_guardian(
        self,
        wallet_address: str,
        guardian: str,
        nonce: Union[int, str],
        paymaster_and_data: str,
        max_fee_per_gas: Union[int, str],
        max_priority_fee_per_gas: Union[int, str],
    ) -> UserOperationModel:
        """Unsigned user operation calling ``setGuardian(guardian)`` on the wallet."""
        call_data = encode_function_call(get_wallet_abi(), "setGuardian", [to_address(guardian)])
        return self._guardian_op(
            wallet_address, nonce, paymaster_and_data, max_fee_per_gas, max_priority_fee_per_gas, call_data
        )

    def transfer_owner(
        self,
        wallet_address: str,
        nonce: Union[int, str],
        paymaster_and_data: str,
        max_fee_per_gas: Union[int, str],
        max_priority_fee_per_gas: Union[int, str],
        new_owner: str,
    ) -> UserOperationModel:
        """Unsigned user operation calling ``transferOwner(new_owner)`` on the wallet."""
        call_data = encode_function_call(get_wallet_abi(), "transferOwner", [to_address(new_owner)])
        return self._guardian_op(
            wallet_address, nonce, paymaster_and_data, max_fee_per_gas, max_priority_fee_per_gas, call_data
        )
