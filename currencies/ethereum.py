from __future__ import annotations

from decimal import Decimal
from typing import Optional

from web3 import Web3

from errors import AppError, EstimationFailed, NotATransfer, NotFound, classify_exception
from execution.evm import EvmProvider
from observability import build_log_context, log_event
from pricing import PriceOracle
from signing import Signer

from .base import (
    BuiltTransaction,
    CurrencyConfig,
    GasPriceSource,
    NormalizedTransfer,
    UnsignedTransaction,
    confirmation_state,
)
from .fees import OracleGasPriceSource, gas_cost
from .units import AmountLike, BaseUnit, parse_amount

NATIVE_TRANSFER_GAS = 21000


class EthereumCurrency:
    """
    Native coin of an EVM chain (ETH, MATIC, BNB, ...). Fees are in wei.
    """

    def __init__(
        self,
        config: CurrencyConfig,
        *,
        provider: EvmProvider,
        price_oracle: PriceOracle,
        wallet: Optional[Signer] = None,
        gas_price_source: Optional[GasPriceSource] = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.price_oracle = price_oracle
        self.wallet = wallet
        self._gas_price_source = gas_price_source or OracleGasPriceSource(
            price_oracle, config.ticker, config.base.scale
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def ticker(self) -> str:
        return self.config.ticker

    @property
    def base(self) -> BaseUnit:
        return self.config.base

    def get_gas_price_source(self) -> GasPriceSource:
        return self._gas_price_source

    async def price(self) -> Decimal:
        return await self.price_oracle.get_price(self.ticker)

    def _sender(self) -> Optional[str]:
        return self.wallet.get_address() if self.wallet is not None else None

    async def get_tx(self, tx_id: str) -> NormalizedTransfer:
        try:
            tx = await self.provider.get_transaction(tx_id)
        except AppError:
            raise
        except Exception as e:
            raise classify_exception(e) from e
        if not tx:
            raise NotFound(f"Tx {tx_id} doesn't exist", {"tx_id": tx_id})
        if not tx.get("to"):
            raise NotATransfer(f"Tx {tx_id} is a contract creation", {"tx_id": tx_id})

        block_number = tx.get("blockNumber")
        block_height = int(block_number) if block_number is not None else None
        latest = None
        if block_height is not None:
            try:
                latest = await self.provider.get_block_number()
            except Exception as e:
                raise classify_exception(e) from e
        pending, confirmed = confirmation_state(block_height, latest, self.config.min_confirmations)

        return NormalizedTransfer(
            from_address=tx.get("from"),
            to=str(tx["to"]),
            block_height=block_height,
            amount=int(tx.get("value") or 0),
            pending=pending,
            confirmed=confirmed,
        )

    async def _estimate_gas(self, value: int, to: Optional[str], sender: Optional[str]) -> tuple[int, int]:
        try:
            gas_price = await self.provider.get_gas_price()
            if to:
                call = {"to": Web3.to_checksum_address(to), "value": value}
                if sender:
                    call["from"] = sender
                gas_limit = await self.provider.estimate_gas(call)
            else:
                gas_limit = NATIVE_TRANSFER_GAS
        except Exception as e:
            raise EstimationFailed(f"Unable to estimate gas for {self.name}: {e}", {"currency": self.name}) from e
        return gas_price, gas_limit

    async def get_fee(self, amount: AmountLike, to: Optional[str] = None) -> int:
        value = parse_amount(amount)
        gas_price, gas_limit = await self._estimate_gas(value, to, self._sender())
        return gas_cost(gas_price, gas_limit)

    async def create_tx(self, amount: AmountLike, to: str) -> BuiltTransaction:
        value = parse_amount(amount)
        sender = self._sender()
        if not sender:
            raise ValueError(f"{self.name}: a wallet is required to build a transaction")

        gas_price, gas_limit = await self._estimate_gas(value, to, sender)
        try:
            chain_id = await self.provider.get_chain_id()
            nonce = await self.provider.get_transaction_count(sender)
        except Exception as e:
            raise EstimationFailed(
                f"Unable to read chain id / nonce for {self.name}: {e}", {"currency": self.name}
            ) from e

        recipient = Web3.to_checksum_address(to)
        tx = UnsignedTransaction(
            to=recipient,
            recipient=recipient,
            data="0x",
            gas_price=gas_price,
            gas_limit=gas_limit,
            chain_id=chain_id,
            nonce=nonce,
            from_address=sender,
            value=value,
        )
        log_event("tx_built", level="info", **build_log_context(currency=self.name, chain_id=chain_id, nonce=nonce))
        return BuiltTransaction(tx=tx)
