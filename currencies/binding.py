from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from web3 import Web3

from errors import ContractUnavailable, EstimationFailed
from execution.evm import ERC20_MIN_ABI, EvmProvider
from observability import log_event

from .units import BaseUnit, parse_amount

T = TypeVar("T")


class AsyncOnce(Generic[T]):
    """
    Once-initialized async cell.

    The first caller runs `factory`; concurrent callers wait on the same lock
    and get the stored value. If `factory` raises, nothing is stored and the
    next caller runs it again.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._lock = asyncio.Lock()
        self._value: Optional[T] = None
        self._set = False

    @property
    def resolved(self) -> bool:
        return self._set

    def peek(self) -> Optional[T]:
        return self._value

    async def get(self) -> T:
        if self._set:
            return self._value  # type: ignore[return-value]
        async with self._lock:
            if not self._set:
                self._value = await self._factory()
                self._set = True
        return self._value  # type: ignore[return-value]


@dataclass(frozen=True)
class TokenBinding:
    """
    Materialized handle to a deployed ERC20 contract.
    """

    contract: Any
    contract_address: str
    decimals: int

    @property
    def base(self) -> BaseUnit:
        return BaseUnit.from_decimals("wei", self.decimals)

    async def estimate_transfer_gas(self, to: str, amount: Any, sender: Optional[str] = None) -> int:
        value = parse_amount(amount)
        params = {"from": sender} if sender else {}
        try:
            fn = self.contract.functions.transfer(Web3.to_checksum_address(to), value)
            gas = await fn.estimate_gas(params)
        except Exception as e:
            raise EstimationFailed(
                f"Unable to estimate gas for transfer on {self.contract_address}: {e}",
                {"contract_address": self.contract_address},
            ) from e
        return int(gas)


async def resolve_token_binding(provider: EvmProvider, contract_address: str) -> TokenBinding:
    try:
        contract = provider.contract(contract_address, ERC20_MIN_ABI)
        decimals = int(await contract.functions.decimals().call())
    except Exception as e:
        raise ContractUnavailable(
            f"Unable to read decimals() from {contract_address}: {e}",
            {"contract_address": contract_address},
        ) from e
    if decimals < 0 or decimals > 255:
        raise ContractUnavailable(
            f"Invalid ERC20 decimals() from {contract_address}: {decimals}",
            {"contract_address": contract_address, "decimals": decimals},
        )
    log_event("token_binding_resolved", level="debug", contract_address=contract_address, decimals=decimals)
    return TokenBinding(contract=contract, contract_address=contract_address, decimals=decimals)
