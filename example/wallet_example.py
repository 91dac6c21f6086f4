from web3 import AsyncHTTPProvider, AsyncWeb3
import httpx

from aa_wallet import BundlerClient, WalletConfig, WalletLib
from aa_wallet.evm import ENTRY_POINT_V06_ADDRESS, SignatureMode, encode_signature, sign_user_op_hash

rpc_url = "https://sepolia.infura.io/v3/xxxx"  # Replace with actual RPC endpoint
bundler_url = "https://bundler.example.com/rpc"
owner_pk = "0xxxx"
owner = "0xxxx"
wallet_logic = "0xxxx"
guardian = "0xxxx"

# AA_WALLET_PROXY_ARTIFACT / AA_WALLET_FACTORY_ARTIFACT are read from .env
lib = WalletLib(WalletConfig.from_env())


async def main():
    w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
    chain_id = await w3.eth.chain_id

    op = lib.activate_wallet_op(
        wallet_logic,
        ENTRY_POINT_V06_ADDRESS,
        owner,
        upgrade_delay=86400,
        guardian_delay=86400,
        guardian=guardian,
        paymaster_and_data="0x",
        max_fee_per_gas=await w3.eth.gas_price,
        max_priority_fee_per_gas=10 ** 9,
    )
    print("Wallet address:", op.sender)
    print("Current nonce:", await WalletLib.get_nonce(w3, op.sender))

    async with BundlerClient(bundler_url, timeout=httpx.Timeout(60.0, read=120.0)) as bundler:
        op = op.model_copy(update=await bundler.estimate_user_operation_gas(op, ENTRY_POINT_V06_ADDRESS))
        op_hash = op.get_user_op_hash(ENTRY_POINT_V06_ADDRESS, chain_id)
        signature = encode_signature(SignatureMode.OWNER, owner, sign_user_op_hash(owner_pk, op_hash))
        return await bundler.send_user_operation(op.with_signature(signature), ENTRY_POINT_V06_ADDRESS)


if __name__ == "__main__":
    import asyncio
    user_op_hash = asyncio.run(main())
    print("UserOperation hash:", user_op_hash)
