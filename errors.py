from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

import aiohttp
import requests
from web3.exceptions import ContractLogicError, TransactionNotFound


@dataclass
class AppError(Exception):
    code: str
    message: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        return self.message


class CurrencyError(AppError):
    """
    Base for the currency-layer error taxonomy.

    Every subclass carries a stable `code` so callers can branch on the kind
    of failure, and a `retryable` flag telling whether retrying the same call
    can succeed (transient network trouble) or not (a permanent classification).
    """

    error_code: ClassVar[str] = "currency_error"
    retryable: ClassVar[bool] = False

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(self.error_code, message, dict(data or {}))


class NotFound(CurrencyError):
    error_code = "tx_not_found"


class NotATransfer(CurrencyError):
    error_code = "not_a_transfer"


class ContractUnavailable(CurrencyError):
    error_code = "contract_unavailable"
    retryable = True


class PriceUnavailable(CurrencyError):
    error_code = "price_unavailable"
    retryable = True


class EstimationFailed(CurrencyError):
    error_code = "estimation_failed"
    retryable = True


class ChainUnavailable(CurrencyError):
    error_code = "chain_unavailable"
    retryable = True


class UnsupportedCurrency(CurrencyError):
    error_code = "unsupported_currency"


def classify_exception(e: Exception) -> AppError:
    """
    Map currency-layer, web3 and HTTP failures into stable error codes.
    """
    if isinstance(e, AppError):
        return e
    if isinstance(e, TransactionNotFound):
        return NotFound(str(e))
    if isinstance(e, ContractLogicError):
        return AppError("contract_reverted", str(e), {})
    if isinstance(e, requests.Timeout):
        return AppError("http_timeout", str(e), {})
    if isinstance(e, requests.RequestException):
        return AppError("http_error", str(e), {})
    if isinstance(e, (TimeoutError, ConnectionError, aiohttp.ClientError)):
        return ChainUnavailable(str(e), {"exception": type(e).__name__})

    return AppError("unknown_error", str(e), {})
