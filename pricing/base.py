from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from errors import PriceUnavailable


class PriceOracle(Protocol):
    """
    Spot price of a ticker in the configured fiat currency.
    """

    async def get_price(self, ticker: str) -> Decimal:
        ...


def parse_price(raw: Any, *, ticker: str, source: str) -> Decimal:
    """
    Oracle payloads carry JSON floats; go through str so Decimal keeps the
    printed digits instead of the binary expansion.
    """
    if raw is None or isinstance(raw, bool):
        raise PriceUnavailable(f"{source} returned no rate for {ticker}", {"ticker": ticker, "source": source})
    try:
        price = Decimal(str(raw))
    except InvalidOperation as e:
        raise PriceUnavailable(
            f"{source} returned a malformed rate for {ticker}: {raw!r}",
            {"ticker": ticker, "source": source},
        ) from e
    if not price.is_finite() or price <= 0:
        raise PriceUnavailable(
            f"{source} returned a non-positive rate for {ticker}: {raw!r}",
            {"ticker": ticker, "source": source},
        )
    return price
