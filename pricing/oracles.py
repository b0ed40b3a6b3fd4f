from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Dict, Optional

import requests

from app.core.settings import settings
from errors import PriceUnavailable
from observability import log_event

from .base import parse_price


class RedstonePriceOracle:
    """
    Spot prices from the Redstone HTTP API (USD quoted).
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.base_url = (base_url or settings.REDSTONE_API_URL).rstrip("/")
        self.timeout = float(timeout or settings.HTTP_TIMEOUT_SEC)

    def _fetch(self, ticker: str) -> Any:
        params = {"symbol": ticker, "provider": "redstone", "limit": 1}
        response = requests.get(f"{self.base_url}/prices", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def get_price(self, ticker: str) -> Decimal:
        try:
            data = await asyncio.to_thread(self._fetch, ticker)
        except (requests.RequestException, ValueError) as e:
            log_event("price_fetch_failed", level="warning", source="redstone", ticker=ticker, error=str(e))
            raise PriceUnavailable(f"Redstone price request failed for {ticker}: {e}", {"ticker": ticker}) from e

        entry = data[0] if isinstance(data, list) and data else data
        raw = entry.get("value") if isinstance(entry, dict) else None
        return parse_price(raw, ticker=ticker, source="redstone")


class LiveCoinWatchPriceOracle:
    """
    Spot prices from LiveCoinWatch, for tickers Redstone does not list.

    Env vars:
    - LIVECOINWATCH_API_KEY: sent as x-api-key
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        currency: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key or settings.LIVECOINWATCH_API_KEY
        self.base_url = (base_url or settings.LIVECOINWATCH_API_URL).rstrip("/")
        self.currency = currency or settings.FIAT_CURRENCY
        self.timeout = float(timeout or settings.HTTP_TIMEOUT_SEC)

    def _fetch(self, ticker: str) -> Dict[str, Any]:
        headers = {"x-api-key": self.api_key or "", "content-type": "application/json"}
        body = {"currency": self.currency, "code": ticker}
        response = requests.post(f"{self.base_url}/coins/single", json=body, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def get_price(self, ticker: str) -> Decimal:
        if not self.api_key:
            raise PriceUnavailable("LIVECOINWATCH_API_KEY not set", {"ticker": ticker})
        try:
            data = await asyncio.to_thread(self._fetch, ticker)
        except (requests.RequestException, ValueError) as e:
            log_event("price_fetch_failed", level="warning", source="livecoinwatch", ticker=ticker, error=str(e))
            raise PriceUnavailable(f"LiveCoinWatch price request failed for {ticker}: {e}", {"ticker": ticker}) from e

        raw = data.get("rate") if isinstance(data, dict) else None
        return parse_price(raw, ticker=ticker, source="livecoinwatch")
