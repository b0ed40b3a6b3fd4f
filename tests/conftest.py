import os
import sys
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from currencies import CurrencyConfig, Erc20Currency  # noqa: E402
from errors import PriceUnavailable  # noqa: E402
from signing import WatchOnlySigner  # noqa: E402

TOKEN_ADDRESS = "0x" + "11" * 20
SENDER = "0x" + "22" * 20
RECIPIENT = "0x" + "0" * 37 + "abc"


class StaticOracle:
    def __init__(self, prices):
        self.prices = prices
        self.calls = []

    async def get_price(self, ticker):
        self.calls.append(ticker)
        if ticker not in self.prices:
            raise PriceUnavailable(f"no price for {ticker}", {"ticker": ticker})
        return Decimal(str(self.prices[ticker]))


def _make_provider(
    tx=None,
    decimals=18,
    gas_price=50,
    gas_limit=21000,
    block_number=100,
    chain_id=1,
    nonce=7,
):
    provider = MagicMock()
    provider.get_transaction = AsyncMock(return_value=tx)
    provider.get_block_number = AsyncMock(return_value=block_number)
    provider.get_gas_price = AsyncMock(return_value=gas_price)
    provider.get_chain_id = AsyncMock(return_value=chain_id)
    provider.get_transaction_count = AsyncMock(return_value=nonce)
    provider.estimate_gas = AsyncMock(return_value=gas_limit)

    contract = MagicMock()
    contract.functions.decimals.return_value.call = AsyncMock(return_value=decimals)
    contract.functions.transfer.return_value.estimate_gas = AsyncMock(return_value=gas_limit)
    provider.contract.return_value = contract
    return provider


@pytest.fixture
def make_provider():
    return _make_provider


@pytest.fixture
def oracle():
    return StaticOracle({"ETH": 2000, "TKN": 1})


@pytest.fixture
def token_config():
    return CurrencyConfig(
        name="token",
        ticker="TKN",
        provider_url="http://localhost:8545",
        min_confirmations=3,
        contract_address=TOKEN_ADDRESS,
    )


@pytest.fixture
def make_token(token_config, oracle):
    def _make(provider, wallet=SENDER, price_oracle=None):
        return Erc20Currency(
            token_config,
            provider=provider,
            price_oracle=price_oracle or oracle,
            wallet=WatchOnlySigner(wallet) if wallet else None,
        )

    return _make
