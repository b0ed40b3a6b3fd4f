from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Protocol

from web3 import Web3


class SignedTx(Protocol):
    raw_transaction: bytes


class Signer(ABC):
    """
    The wallet seam of the currency layer.

    Currencies only ever read the address (sender for gas estimation and
    nonce lookup). Signing happens outside, on the built payload.
    """

    @abstractmethod
    def get_address(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def sign_transaction(self, tx: Dict[str, Any], *, chain_id: int | None = None) -> SignedTx:
        raise NotImplementedError


class WatchOnlySigner(Signer):
    """
    Address-only wallet: enough to quote fees and build payloads, never signs.
    """

    def __init__(self, address: str) -> None:
        self._address = Web3.to_checksum_address(address)

    def get_address(self) -> str:
        return self._address

    def sign_transaction(self, tx: Dict[str, Any], *, chain_id: int | None = None) -> SignedTx:
        raise PermissionError(f"watch-only wallet {self._address} cannot sign")
