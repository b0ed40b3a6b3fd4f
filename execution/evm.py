from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from app.core.settings import settings


def _env(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return None
    v = v.strip()
    return v or None


def rpc_url_for(chain: str, default: Optional[str] = None) -> str:
    """
    Resolve RPC URL for a chain.

    Env precedence (chain=boba-eth -> BOBA_ETH):
    - EVM_RPC_URL_<CHAIN>
    - RPC_URL_<CHAIN>
    - `default` (the registry's public endpoint)
    """
    c = (chain or "").strip().lower()
    key = c.upper().replace("-", "_")
    url = _env(f"EVM_RPC_URL_{key}") or _env(f"RPC_URL_{key}") or default
    if not url:
        raise ValueError(
            f"Missing RPC URL for chain '{chain}'. Set EVM_RPC_URL_{key} (or RPC_URL_{key})."
        )
    return url


@lru_cache(maxsize=16)
def get_web3(url: str) -> AsyncWeb3:
    timeout = aiohttp.ClientTimeout(total=float(settings.HTTP_TIMEOUT_SEC))
    return AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": timeout}))


ERC20_MIN_ABI: List[Dict[str, Any]] = [
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [{"name": "_to", "type": "address"}, {"name": "_value", "type": "uint256"}],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


class EvmProvider:
    """
    The handful of JSON-RPC calls the currency layer depends on.

    Timeouts belong to the underlying HTTP provider; nothing here retries.
    """

    def __init__(self, w3: AsyncWeb3) -> None:
        self._w3 = w3

    @classmethod
    def from_url(cls, url: str) -> "EvmProvider":
        return cls(get_web3(url))

    async def get_transaction(self, tx_id: str) -> Optional[Dict[str, Any]]:
        try:
            tx = await self._w3.eth.get_transaction(tx_id)
        except TransactionNotFound:
            return None
        return dict(tx) if tx else None

    async def get_block_number(self) -> int:
        return int(await self._w3.eth.block_number)

    async def get_gas_price(self) -> int:
        return int(await self._w3.eth.gas_price)

    async def get_chain_id(self) -> int:
        return int(await self._w3.eth.chain_id)

    async def get_transaction_count(self, address: str) -> int:
        # "pending" counts txs still in the mempool
        addr = Web3.to_checksum_address(address)
        return int(await self._w3.eth.get_transaction_count(addr, "pending"))

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return int(await self._w3.eth.estimate_gas(tx))

    def contract(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        return self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
