"""
ERC-4337 Bundler JSON-RPC Client

Thin JSON-RPC layer over httpx for submitting user operations to a bundler
and polling their receipts.  Timeouts and retries are left to the caller via
the usual httpx client arguments.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..evm.schemas import UserOperationModel
from ..evm.utils import to_address
from ..exceptions import BundlerError

logger = logging.getLogger(__name__)


class BundlerClient(httpx.AsyncClient):
    """
    Extended httpx.AsyncClient speaking the bundler JSON-RPC API.

    Fully compatible with httpx.AsyncClient - supports all constructor
    arguments and can be used as an async context manager.

    Usage:
        ```python
        async with BundlerClient("https://bundler.example.com/rpc", timeout=30) as bundler:
            op_hash = await bundler.send_user_operation(op, ENTRY_POINT_V06_ADDRESS)
            receipt = await bundler.get_user_operation_receipt(op_hash)
        ```
    """

    def __init__(self, rpc_url: str, **kwargs):
        """
        Initialize client for one bundler endpoint.

        Args:
            rpc_url: Bundler JSON-RPC endpoint.
            **kwargs: All standard httpx.AsyncClient arguments (timeout, headers, transport, etc.)
        """
        super().__init__(**kwargs)
        self._rpc_url = rpc_url
        self._ids = itertools.count(1)

    async def rpc_call(self, method: str, params: List[Any]) -> Any:
        """
        Perform one JSON-RPC call and return its ``result``.

        Raises:
            BundlerError: If the response carries an ``error`` object.
            httpx.HTTPStatusError: On non-2xx HTTP responses.
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("bundler request %s", method)
        response = await self.post(self._rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()

        error = body.get("error")
        if error is not None:
            raise BundlerError(
                error.get("message", "bundler error"),
                code=error.get("code"),
                data=error.get("data"),
                rpc_method=method,
            )
        return body.get("result")

    async def send_user_operation(self, user_operation: UserOperationModel, entry_point: str) -> str:
        """``eth_sendUserOperation``; returns the user operation hash."""
        return await self.rpc_call(
            "eth_sendUserOperation", [user_operation.to_rpc_dict(), to_address(entry_point)]
        )

    async def estimate_user_operation_gas(
        self, user_operation: UserOperationModel, entry_point: str
    ) -> Dict[str, int]:
        """
        ``eth_estimateUserOperationGas``.

        Returns:
            Dict with ``callGasLimit``, ``verificationGasLimit`` and
            ``preVerificationGas`` as ints.
        """
        result = await self.rpc_call(
            "eth_estimateUserOperationGas", [user_operation.to_rpc_dict(), to_address(entry_point)]
        )
        return {
            key: int(result[key], 16) if isinstance(result[key], str) else int(result[key])
            for key in ("callGasLimit", "verificationGasLimit", "preVerificationGas")
            if key in result
        }

    async def get_user_operation_receipt(self, user_op_hash: str) -> Optional[Dict[str, Any]]:
        """``eth_getUserOperationReceipt``; ``None`` while the operation is pending."""
        return await self.rpc_call("eth_getUserOperationReceipt", [user_op_hash])

    async def supported_entry_points(self) -> List[str]:
        return await self.rpc_call("eth_supportedEntryPoints", [])

    async def chain_id(self) -> int:
        return int(await self.rpc_call("eth_chainId", []), 16)
