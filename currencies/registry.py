from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from app.core.settings import settings
from errors import UnsupportedCurrency
from execution.evm import EvmProvider, rpc_url_for
from pricing import LiveCoinWatchPriceOracle, PriceOracle, RedstonePriceOracle
from signing import Signer

from .base import CurrencyConfig
from .erc20 import Erc20Currency
from .ethereum import EthereumCurrency
from .fees import OracleGasPriceSource

AnyCurrency = Union[EthereumCurrency, Erc20Currency]


@dataclass(frozen=True)
class CurrencySpec:
    ticker: str
    provider_url: str
    min_confirmations: Optional[int] = None
    contract_address: Optional[str] = None
    # Oracle for the currency's own price when the default one doesn't list it.
    price_source: str = "redstone"
    # Coin gas is paid in, when it differs from `ticker`.
    gas_ticker: Optional[str] = None


CURRENCIES: Dict[str, CurrencySpec] = {
    "ethereum": CurrencySpec("ETH", "https://cloudflare-eth.com/"),
    "matic": CurrencySpec("MATIC", "https://polygon-rpc.com", min_confirmations=1),
    "arbitrum": CurrencySpec("ETH", "https://arb1.arbitrum.io/rpc"),
    "bnb": CurrencySpec("BNB", "https://bsc-dataseed.binance.org"),
    "avalanche": CurrencySpec("AVAX", "https://api.avax.network/ext/bc/C/rpc"),
    "boba-eth": CurrencySpec("ETH", "https://mainnet.boba.network/", min_confirmations=1),
    "boba": CurrencySpec(
        "BOBA",
        "https://mainnet.boba.network/",
        min_confirmations=1,
        contract_address="0xa18bF3994C0Cc6E3b63ac420308E5383f53120D7",
        price_source="livecoinwatch",
        gas_ticker="ETH",
    ),
}


def get_currency(
    currency: str,
    wallet: Optional[Signer] = None,
    provider_url: Optional[str] = None,
    contract_address: Optional[str] = None,
    price_oracle: Optional[PriceOracle] = None,
    provider: Optional[EvmProvider] = None,
) -> AnyCurrency:
    """
    Build the currency object for a chain name.

    RPC URL precedence: `provider_url`, then EVM_RPC_URL_<NAME> / RPC_URL_<NAME>,
    then the public default. Gas is always priced in the chain's native coin
    through the Redstone oracle (or `price_oracle` when given).
    """
    name = (currency or "").strip().lower()
    entry = CURRENCIES.get(name)
    if entry is None:
        raise UnsupportedCurrency(f"Unknown/Unsupported currency {currency}", {"currency": currency})

    url = provider_url or rpc_url_for(name, entry.provider_url)
    config = CurrencyConfig(
        name=name,
        ticker=entry.ticker,
        provider_url=url,
        min_confirmations=(
            entry.min_confirmations if entry.min_confirmations is not None else settings.DEFAULT_MIN_CONFIRMATIONS
        ),
        contract_address=contract_address or entry.contract_address,
    )
    chain = provider or EvmProvider.from_url(url)
    gas_oracle = price_oracle or RedstonePriceOracle()

    if config.contract_address is None:
        return EthereumCurrency(config, provider=chain, price_oracle=gas_oracle, wallet=wallet)

    if price_oracle is None and entry.price_source == "livecoinwatch":
        token_oracle: PriceOracle = LiveCoinWatchPriceOracle()
    else:
        token_oracle = gas_oracle
    return Erc20Currency(
        config,
        provider=chain,
        price_oracle=token_oracle,
        wallet=wallet,
        gas_price_source=OracleGasPriceSource(gas_oracle, entry.gas_ticker or entry.ticker, 10**18),
    )
