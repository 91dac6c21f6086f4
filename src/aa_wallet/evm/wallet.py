"""
Smart Contract Wallet Facade

Computes counterfactual wallet addresses, builds the first-time activation
user operation and performs the few on-chain reads a client needs before
submitting an operation (wallet nonce, paymaster exchange price).

Key Features:
    - Wallet init code and CREATE2 address calculation
    - Activation user operation through the wallet factory
    - Nonce lookup that treats undeployed wallets as nonce 0
    - Token paymaster price query and ``paymasterAndData`` encoding

Dependencies:
    - web3.py: For blockchain RPC interaction
    - eth_abi: For argument and return-value encoding
"""

import logging
from typing import Any, Optional, Sequence, Union

from eth_abi import encode
from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput

from ..exceptions import BlockchainInteractionError, InvalidNonce, UnsupportedToken
from .abis import get_token_paymaster_abi, get_wallet_abi
from .constants import ZERO_ADDRESS
from .create2 import derive_address
from .guardian import Guardian
from .initcode import InitCodePacker
from .salt import number_to_bytes32
from .schemas import ContractArtifact, UserOperationModel, WalletConfig
from .utils import to_address

logger = logging.getLogger(__name__)


class WalletLib:
    """
    Wallet operations bound to a ``WalletConfig``.

    Attributes:
        config: Configuration shared with the embedded ``Guardian`` helper.
        guardian: ``Guardian`` bound to the same configuration.

    Example::

        lib = WalletLib(WalletConfig(proxy=proxy_artifact, wallet_factory=factory_artifact))
        address = lib.calculate_wallet_address(logic, entry_point, owner, 3600, 3600, guardian)
        op = lib.activate_wallet_op(
            logic, entry_point, owner, 3600, 3600, guardian,
            paymaster_and_data="0x", max_fee_per_gas=10**9, max_priority_fee_per_gas=10**8,
        )
    """

    def __init__(self, config: WalletConfig):
        self.config = config
        self.guardian = Guardian(config)
        self._packer = InitCodePacker(config)

    @property
    def singleton_factory(self) -> str:
        return self.config.singleton_factory

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def get_wallet_code(
        self,
        wallet_logic: str,
        entry_point: str,
        owner: str,
        upgrade_delay: int,
        guardian_delay: int,
        guardian: str,
    ) -> str:
        """Proxy init code initializing ``wallet_logic`` for ``owner``."""
        return self._packer.wallet_init_code(wallet_logic, entry_point, owner, upgrade_delay, guardian_delay, guardian)

    def calculate_wallet_address(
        self,
        wallet_logic: str,
        entry_point: str,
        owner: str,
        upgrade_delay: int,
        guardian_delay: int,
        guardian: str,
        salt: Optional[int] = None,
    ) -> str:
        """
        Counterfactual wallet address.

        Args:
            salt: Numeric salt; ``None`` is the zero salt.

        Returns:
            str: Checksummed address.
        """
        init_code = self.get_wallet_code(wallet_logic, entry_point, owner, upgrade_delay, guardian_delay, guardian)
        address = derive_address(self.singleton_factory, number_to_bytes32(salt), init_code)
        logger.debug("wallet address for owner %s (salt=%s): %s", owner, salt, address)
        return address

    def calculate_wallet_address_by_code(
        self,
        init_contract: ContractArtifact,
        init_args: Optional[Sequence[Any]],
        salt: Optional[int] = None,
    ) -> str:
        """CREATE2 address of any artifact deployed by the singleton factory."""
        init_code = self._packer.artifact_init_code(init_contract, init_args)
        return derive_address(self.singleton_factory, number_to_bytes32(salt), init_code)

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def get_packed_init_code_using_wallet_factory(
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
        """
        ``walletFactory || createWallet(...)``.

        Raises:
            MissingDeploymentTarget: If ``wallet_factory`` is not given and cannot
                be derived from ``wallet_logic``.
        """
        return self._packer.factory_invocation(
            wallet_factory, wallet_logic, entry_point, owner, upgrade_delay, guardian_delay, guardian, salt
        )

    def activate_wallet_op(
        self,
        wallet_logic: str,
        entry_point: str,
        owner: str,
        upgrade_delay: int,
        guardian_delay: int,
        guardian: str,
        paymaster_and_data: str,
        max_fee_per_gas: Union[int, str],
        max_priority_fee_per_gas: Union[int, str],
        salt: Optional[int] = None,
        wallet_factory: Optional[str] = None,
    ) -> UserOperationModel:
        """
        Unsigned user operation that deploys the wallet on first use.

        ``nonce`` is 0, ``callData`` is empty and ``initCode`` is the wallet
        factory invocation.
        """
        wallet_address = self.calculate_wallet_address(
            wallet_logic, entry_point, owner, upgrade_delay, guardian_delay, guardian, salt
        )
        init_code = self.get_packed_init_code_using_wallet_factory(
            wallet_factory, wallet_logic, entry_point, owner, upgrade_delay, guardian_delay, guardian, salt
        )
        return UserOperationModel(
            sender=wallet_address,
            nonce=0,
            initCode=init_code,
            callData="0x",
            callGasLimit=0,
            maxFeePerGas=max_fee_per_gas,
            maxPriorityFeePerGas=max_priority_fee_per_gas,
            paymasterAndData=paymaster_and_data or "0x",
        )

    # ------------------------------------------------------------------
    # On-chain reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get_nonce(w3: AsyncWeb3, wallet_address: str, default_block: str = "latest") -> int:
        """
        Next nonce of a wallet.

        A wallet without code has not been deployed yet and starts at 0.

        Raises:
            InvalidNonce: If ``nonce()`` returns data that is not a uint256.
        """
        address = to_address(wallet_address)
        code = await w3.eth.get_code(address, default_block)
        if not code:
            logger.debug("wallet %s has no code; nonce is 0", address)
            return 0

        contract = w3.eth.contract(address=address, abi=get_wallet_abi())
        try:
            nonce = await contract.functions.nonce().call({"from": ZERO_ADDRESS}, block_identifier=default_block)
        except BadFunctionCallOutput as e:
            raise InvalidNonce(f"nonce of {address} is not a number: {e}", rpc_method="eth_call") from e
        return nonce

    @staticmethod
    async def get_paymaster_exchange_price(w3: AsyncWeb3, paymaster_address: str, token: str) -> int:
        """
        Token price quoted by a token paymaster.

        Raises:
            UnsupportedToken: If the paymaster does not accept ``token``.
            BlockchainInteractionError: If either view returns undecodable data,
                e.g. when ``paymaster_address`` has no code.
        """
        paymaster = to_address(paymaster_address)
        token_address = to_address(token)
        contract = w3.eth.contract(address=paymaster, abi=get_token_paymaster_abi())

        try:
            supported = await contract.functions.isSupportedToken(token_address).call()
            if supported is not True:
                raise UnsupportedToken(token_address, paymaster)
            price = await contract.functions.exchangePrice(token_address).call()
        except BadFunctionCallOutput as e:
            raise BlockchainInteractionError(
                f"cannot read exchange price of {token_address} from paymaster {paymaster}: {e}",
                rpc_method="eth_call",
            ) from e
        logger.debug("paymaster %s price for %s: %s", paymaster, token_address, price)
        return price

    @staticmethod
    def get_paymaster_data(paymaster_address: str, token: str, lowest_price: int) -> str:
        """``paymaster.lower() || abi.encode(address token, uint256 lowestPrice)``."""
        return to_address(paymaster_address).lower() + encode(
            ["address", "uint256"], [to_address(token), lowest_price]
        ).hex()
