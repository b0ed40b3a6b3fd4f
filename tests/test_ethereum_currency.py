import asyncio
from unittest.mock import AsyncMock

import aiohttp
import pytest

from currencies import CurrencyConfig, EthereumCurrency
from errors import ChainUnavailable, NotATransfer, NotFound
from signing import WatchOnlySigner

from conftest import RECIPIENT, SENDER, StaticOracle


def _eth(provider, wallet=SENDER):
    cfg = CurrencyConfig(name="ethereum", ticker="ETH", provider_url="http://localhost", min_confirmations=5)
    return EthereumCurrency(
        cfg,
        provider=provider,
        price_oracle=StaticOracle({"ETH": 2000}),
        wallet=WatchOnlySigner(wallet) if wallet else None,
    )


def test_get_tx_native_value(make_provider):
    tx = {"from": SENDER, "to": RECIPIENT, "value": 10**18, "blockNumber": 10, "input": "0x"}
    t = asyncio.run(_eth(make_provider(tx=tx, block_number=20)).get_tx("0x1"))
    assert t.amount == 10**18
    assert t.to == RECIPIENT
    assert t.confirmed is True
    assert t.pending is False


def test_get_tx_errors(make_provider):
    with pytest.raises(NotFound):
        asyncio.run(_eth(make_provider(tx=None)).get_tx("0x1"))
    creation = {"from": SENDER, "to": None, "value": 0, "blockNumber": None}
    with pytest.raises(NotATransfer):
        asyncio.run(_eth(make_provider(tx=creation)).get_tx("0x1"))


def test_fee_is_gas_cost_in_wei(make_provider):
    provider = make_provider(gas_price=30 * 10**9, gas_limit=21000)
    assert asyncio.run(_eth(provider).get_fee(1, RECIPIENT)) == 30 * 10**9 * 21000


def test_fee_without_recipient_uses_plain_transfer_gas(make_provider):
    provider = make_provider(gas_price=7, gas_limit=99999)
    assert asyncio.run(_eth(provider).get_fee(1)) == 7 * 21000
    provider.estimate_gas.assert_not_awaited()


def test_create_tx_value_transfer(make_provider):
    provider = make_provider(gas_price=5, gas_limit=21000, chain_id=137, nonce=3)
    built = asyncio.run(_eth(provider).create_tx("1000", RECIPIENT))
    tx = built.tx
    assert built.tx_id is None
    assert tx.value == 1000
    assert tx.data == "0x"
    assert tx.to == tx.recipient
    assert (tx.chain_id, tx.nonce) == (137, 3)
    assert tx.to_intent().intent_type == "evm_transaction"


def test_gas_price_source_defaults_to_own_ticker(make_provider):
    assert _eth(make_provider()).get_gas_price_source().ticker == "ETH"


def test_get_tx_transport_failure_is_classified(make_provider):
    provider = make_provider()
    provider.get_transaction = AsyncMock(side_effect=aiohttp.ClientConnectionError("refused"))
    with pytest.raises(ChainUnavailable) as e:
        asyncio.run(_eth(provider).get_tx("0x1"))
    assert e.value.data == {"exception": "ClientConnectionError"}
