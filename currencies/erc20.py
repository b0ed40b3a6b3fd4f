from __future__ import annotations

from decimal import Decimal
from typing import Optional, Tuple

from web3 import Web3

from errors import AppError, EstimationFailed, NotFound, classify_exception
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
from .binding import AsyncOnce, TokenBinding, resolve_token_binding
from .decoder import decode_transfer_calldata, encode_transfer_calldata
from .fees import OracleGasPriceSource, convert_gas_cost, gas_cost
from .units import AmountLike, BaseUnit, parse_amount, to_hex_quantity


class Erc20Currency:
    """
    ERC20 token on an EVM chain.

    - get_tx: decode a `transfer` call into a NormalizedTransfer
    - get_fee: transfer gas cost expressed in this token's base units
    - create_tx: unsigned `transfer` payload for an external signer

    The contract's decimals are read once, on first use, and kept for the
    lifetime of this instance.
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
        if not config.contract_address:
            raise ValueError(f"{config.name}: contract_address is required for an ERC20 currency")
        self.config = config
        self.provider = provider
        self.price_oracle = price_oracle
        self.wallet = wallet
        self._gas_price_source = gas_price_source or OracleGasPriceSource(price_oracle, "ETH", 10**18)
        contract_address = config.contract_address
        self._binding: AsyncOnce[TokenBinding] = AsyncOnce(
            lambda: resolve_token_binding(provider, contract_address)
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def ticker(self) -> str:
        return self.config.ticker

    @property
    def base(self) -> BaseUnit:
        binding = self._binding.peek()
        return binding.base if binding is not None else self.config.base

    async def get_binding(self) -> TokenBinding:
        return await self._binding.get()

    def get_gas_price_source(self) -> GasPriceSource:
        return self._gas_price_source

    async def price(self) -> Decimal:
        return await self.price_oracle.get_price(self.ticker)

    def _sender(self) -> Optional[str]:
        return self.wallet.get_address() if self.wallet is not None else None

    async def get_tx(self, tx_id: str) -> NormalizedTransfer:
        ctx = build_log_context(currency=self.name, tx_id=tx_id)
        try:
            tx = await self.provider.get_transaction(tx_id)
        except AppError:
            raise
        except Exception as e:
            raise classify_exception(e) from e
        if not tx:
            log_event("tx_not_found", level="info", **ctx)
            raise NotFound(f"Tx {tx_id} doesn't exist", {"tx_id": tx_id})

        to, amount = decode_transfer_calldata(tx.get("input", tx.get("data")))

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
            to=to,
            block_height=block_height,
            amount=amount,
            pending=pending,
            confirmed=confirmed,
        )

    async def _estimate_gas(
        self, binding: TokenBinding, to: str, amount: int, sender: Optional[str]
    ) -> Tuple[int, int]:
        try:
            gas_price = await self.provider.get_gas_price()
        except Exception as e:
            raise EstimationFailed(f"Unable to fetch gas price for {self.name}: {e}", {"currency": self.name}) from e
        gas_limit = await binding.estimate_transfer_gas(to, amount, sender)
        return gas_price, gas_limit

    async def get_fee(self, amount: AmountLike, to: Optional[str] = None) -> int:
        """
        Returns the fee in this token's base units equivalent to the gas
        (native currency) cost of transferring `amount` to `to`.
        """
        value = parse_amount(amount)
        binding = await self.get_binding()
        sender = self._sender()
        recipient = to or sender
        if not recipient:
            raise EstimationFailed(
                f"{self.name}: a recipient or a wallet is required to estimate transfer gas",
                {"currency": self.name},
            )

        gas_price, gas_limit = await self._estimate_gas(binding, recipient, value, sender)
        units = gas_cost(gas_price, gas_limit)
        quote = await self.get_gas_price_source().quote()
        token_price = await self.price()
        fee = convert_gas_cost(units, quote, token_price, binding.base.scale)

        log_event(
            "fee_estimated",
            level="debug",
            **build_log_context(
                currency=self.name,
                amount_hex=to_hex_quantity(value),
                gas_price=gas_price,
                gas_limit=gas_limit,
                native_price=str(quote.native_price),
                token_price=str(token_price),
                fee=fee,
            ),
        )
        return fee

    async def create_tx(self, amount: AmountLike, to: str) -> BuiltTransaction:
        """
        Build an unsigned `transfer(to, amount)`. Gas, chain id and nonce are
        read fresh on every call; a retried build never reuses a stale nonce.
        """
        value = parse_amount(amount)
        sender = self._sender()
        if not sender:
            raise ValueError(f"{self.name}: a wallet is required to build a transaction")
        binding = await self.get_binding()
        data = encode_transfer_calldata(to, value)

        gas_price, gas_limit = await self._estimate_gas(binding, to, value, sender)
        try:
            chain_id = await self.provider.get_chain_id()
            nonce = await self.provider.get_transaction_count(sender)
        except Exception as e:
            raise EstimationFailed(
                f"Unable to read chain id / nonce for {self.name}: {e}", {"currency": self.name}
            ) from e

        tx = UnsignedTransaction(
            to=Web3.to_checksum_address(binding.contract_address),
            recipient=Web3.to_checksum_address(to),
            data=data,
            gas_price=gas_price,
            gas_limit=gas_limit,
            chain_id=chain_id,
            nonce=nonce,
            from_address=sender,
        )
        log_event(
            "tx_built",
            level="info",
            **build_log_context(currency=self.name, chain_id=chain_id, nonce=nonce, gas_limit=gas_limit),
        )
        return BuiltTransaction(tx=tx)
