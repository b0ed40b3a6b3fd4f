import asyncio
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import PriceUnavailable
from pricing import LiveCoinWatchPriceOracle, RedstonePriceOracle, parse_price


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def test_redstone_price():
    with patch("pricing.oracles.requests.get", return_value=_response([{"symbol": "ETH", "value": 1834.12}])) as get:
        price = asyncio.run(RedstonePriceOracle(base_url="https://oracle.test").get_price("ETH"))
    assert price == Decimal("1834.12")
    url = get.call_args[0][0]
    assert url == "https://oracle.test/prices"
    assert get.call_args[1]["params"]["symbol"] == "ETH"


def test_redstone_empty_response():
    with patch("pricing.oracles.requests.get", return_value=_response([])):
        with pytest.raises(PriceUnavailable):
            asyncio.run(RedstonePriceOracle().get_price("NOPE"))


def test_redstone_http_error():
    with patch("pricing.oracles.requests.get", side_effect=requests.ConnectionError("down")):
        with pytest.raises(PriceUnavailable) as e:
            asyncio.run(RedstonePriceOracle().get_price("ETH"))
    assert e.value.code == "price_unavailable"


def test_livecoinwatch_price():
    with patch("pricing.oracles.requests.post", return_value=_response({"rate": 0.2481})) as post:
        oracle = LiveCoinWatchPriceOracle(api_key="k", base_url="https://lcw.test", currency="USD")
        price = asyncio.run(oracle.get_price("BOBA"))
    assert price == Decimal("0.2481")
    assert post.call_args[1]["json"] == {"currency": "USD", "code": "BOBA"}
    assert post.call_args[1]["headers"]["x-api-key"] == "k"


def test_livecoinwatch_missing_rate():
    with patch("pricing.oracles.requests.post", return_value=_response({"error": "nope"})):
        with pytest.raises(PriceUnavailable):
            asyncio.run(LiveCoinWatchPriceOracle(api_key="k").get_price("BOBA"))


def test_livecoinwatch_requires_key():
    with patch("pricing.oracles.settings") as s:
        s.LIVECOINWATCH_API_KEY = None
        s.LIVECOINWATCH_API_URL = "https://lcw.test"
        s.FIAT_CURRENCY = "USD"
        s.HTTP_TIMEOUT_SEC = 5
        with pytest.raises(PriceUnavailable):
            asyncio.run(LiveCoinWatchPriceOracle().get_price("BOBA"))


def test_parse_price_rejects_non_positive():
    with pytest.raises(PriceUnavailable):
        parse_price(0, ticker="X", source="t")
    with pytest.raises(PriceUnavailable):
        parse_price("abc", ticker="X", source="t")
    assert parse_price("2.50", ticker="X", source="t") == Decimal("2.50")
