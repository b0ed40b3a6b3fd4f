from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

from errors import PriceUnavailable
from pricing import PriceOracle

from .base import GasQuote


def gas_cost(gas_price: int, gas_limit: int) -> int:
    """
    Gas cost in the chain's smallest native unit (e.g. wei).
    """
    if gas_price < 0 or gas_limit < 0:
        raise ValueError("gas price and gas limit must be >= 0")
    return int(gas_price) * int(gas_limit)


def convert_gas_cost(
    units: int,
    quote: GasQuote,
    token_price: Decimal,
    token_base: int,
) -> int:
    """
    Express a native gas cost in the token's own base units.

        fee_value = native_price * units
        fee       = floor(fee_value * token_base / (native_base * token_price))

    For a token with the native coin's base (18 decimals on most EVM chains)
    the base scales cancel and this is floor(fee_value / token_price). Exact
    rational arithmetic throughout; the result rounds down, never up.
    """
    if token_price <= 0:
        raise PriceUnavailable("token price must be positive", {"token_price": str(token_price)})
    if quote.native_price <= 0:
        raise PriceUnavailable("native price must be positive", {"native_price": str(quote.native_price)})
    fee_value = Fraction(quote.native_price) * units
    fee = fee_value * token_base / (Fraction(quote.native_base) * Fraction(token_price))
    return fee.numerator // fee.denominator


class OracleGasPriceSource:
    """
    Default gas price source: the oracle's price of the chain's native coin.
    """

    def __init__(self, oracle: PriceOracle, ticker: str = "ETH", native_base: int = 10**18) -> None:
        self.oracle = oracle
        self.ticker = ticker
        self.native_base = native_base

    async def quote(self) -> GasQuote:
        price = await self.oracle.get_price(self.ticker)
        return GasQuote(native_price=Decimal(price), native_base=self.native_base)

