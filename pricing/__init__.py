from .base import PriceOracle, parse_price
from .oracles import LiveCoinWatchPriceOracle, RedstonePriceOracle

__all__ = ["PriceOracle", "parse_price", "LiveCoinWatchPriceOracle", "RedstonePriceOracle"]
