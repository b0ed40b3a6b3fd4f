from .base import (
    BuiltTransaction,
    Currency,
    CurrencyConfig,
    GasPriceSource,
    GasQuote,
    NormalizedTransfer,
    UnsignedTransaction,
)
from .binding import AsyncOnce, TokenBinding
from .decoder import decode_transfer_calldata, encode_transfer_calldata
from .erc20 import Erc20Currency
from .ethereum import EthereumCurrency
from .fees import OracleGasPriceSource, convert_gas_cost
from .registry import CURRENCIES, get_currency
from .units import BaseUnit, parse_amount, to_atomic

__all__ = [
    "BuiltTransaction",
    "Currency",
    "CurrencyConfig",
    "GasPriceSource",
    "GasQuote",
    "NormalizedTransfer",
    "UnsignedTransaction",
    "AsyncOnce",
    "TokenBinding",
    "decode_transfer_calldata",
    "encode_transfer_calldata",
    "Erc20Currency",
    "EthereumCurrency",
    "OracleGasPriceSource",
    "convert_gas_cost",
    "CURRENCIES",
    "get_currency",
    "BaseUnit",
    "parse_amount",
    "to_atomic",
]
