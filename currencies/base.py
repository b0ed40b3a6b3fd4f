from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

from signing.intents import EvmTxIntent, build_evm_tx_intent

from .decoder import TRANSFER_SELECTOR, decode_transfer_calldata
from .units import AmountLike, BaseUnit


@dataclass(frozen=True)
class CurrencyConfig:
    """
    Immutable descriptor of a currency, built by the registry.
    """

    name: str
    ticker: str
    provider_url: str
    min_confirmations: int = 5
    base: BaseUnit = field(default_factory=lambda: BaseUnit("wei", 10**18))
    contract_address: Optional[str] = None


@dataclass(frozen=True)
class NormalizedTransfer:
    from_address: Optional[str]
    to: str
    block_height: Optional[int]
    amount: int
    pending: bool
    confirmed: bool


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Transfer payload awaiting an external signer.

    `to` is where the tx is sent (the token contract for ERC20 transfers),
    `recipient` is who receives the funds.
    """

    to: str
    recipient: str
    data: str
    gas_price: int
    gas_limit: int
    chain_id: int
    nonce: int
    from_address: Optional[str] = None
    value: int = 0

    def to_tx_dict(self) -> Dict[str, Any]:
        tx: Dict[str, Any] = {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
            "chainId": self.chain_id,
            "nonce": self.nonce,
        }
        if self.from_address:
            tx["from"] = self.from_address
        return tx

    def to_intent(self) -> EvmTxIntent:
        token_amount = None
        if self.data[2:10] == TRANSFER_SELECTOR:
            _, token_amount = decode_transfer_calldata(self.data)
        return build_evm_tx_intent(
            self.to_tx_dict(),
            chain_id=self.chain_id,
            recipient=self.recipient,
            token_amount=token_amount,
        )


@dataclass(frozen=True)
class BuiltTransaction:
    tx: UnsignedTransaction
    # Unknown until the payload is signed and broadcast elsewhere.
    tx_id: Optional[str] = None


@dataclass(frozen=True)
class GasQuote:
    """
    Fiat price of the chain's gas currency and that currency's base scale.
    """

    native_price: Decimal
    native_base: int


class GasPriceSource(Protocol):
    async def quote(self) -> GasQuote:
        ...


class Currency(Protocol):
    """
    Operation set every chain family implements on its own.
    """

    config: CurrencyConfig

    async def get_tx(self, tx_id: str) -> NormalizedTransfer:
        ...

    async def get_fee(self, amount: AmountLike, to: Optional[str] = None) -> int:
        ...

    async def create_tx(self, amount: AmountLike, to: str) -> BuiltTransaction:
        ...

    async def price(self) -> Decimal:
        ...

    def get_gas_price_source(self) -> GasPriceSource:
        ...


def confirmation_state(
    block_height: Optional[int], latest_block: Optional[int], min_confirmations: int
) -> tuple[bool, bool]:
    """
    (pending, confirmed) for a transaction mined at `block_height`.

    A pending transaction is never confirmed, even when no confirmations
    are required.
    """
    pending = block_height is None
    if pending or latest_block is None:
        confirmations = 0
    else:
        confirmations = max(0, latest_block - block_height + 1)
    return pending, not pending and confirmations >= min_confirmations
