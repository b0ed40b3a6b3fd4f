"""
Fixed-layout codec for ERC20 `transfer(address,uint256)` call data.

Only the single-call shape is understood; this is not an ABI decoder. The
hex string (with `0x`) is laid out as:

    [0:2]      "0x"
    [2:10]     method selector, a9059cbb
    [10:34]    left padding of the address word (not checked)
    [34:74]    recipient address, 20 bytes
    [74:138]   amount, uint256 big-endian

Anything whose length or selector differs is rejected, including transfers
with extra arguments and other methods on the same contract.
"""

from __future__ import annotations

import re
from typing import Any, Tuple

from eth_abi import encode
from web3 import Web3

from errors import NotATransfer

from .units import parse_amount

TRANSFER_SELECTOR = "a9059cbb"
TRANSFER_CALLDATA_LENGTH = 138

SELECTOR_SLICE = slice(2, 10)
RECIPIENT_SLICE = slice(34, 74)
AMOUNT_SLICE = slice(74, TRANSFER_CALLDATA_LENGTH)
ARGUMENTS_RE = re.compile(r"[0-9a-f]{128}")


def calldata_to_hex(data: Any) -> str:
    """
    web3 hands tx input back as HexBytes; providers and tests may use str.
    """
    if data is None:
        return "0x"
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    s = str(data).strip().lower()
    return s if s.startswith("0x") else "0x" + s


def decode_transfer_calldata(data: Any) -> Tuple[str, int]:
    """
    Return (recipient, amount) from transfer call data, or raise NotATransfer.
    """
    s = calldata_to_hex(data)
    if len(s) != TRANSFER_CALLDATA_LENGTH:
        raise NotATransfer(
            "Tx isn't an ERC20 transfer (unexpected call data length)",
            {"length": len(s), "expected_length": TRANSFER_CALLDATA_LENGTH},
        )
    if s[SELECTOR_SLICE] != TRANSFER_SELECTOR:
        raise NotATransfer(
            "Tx isn't an ERC20 transfer (unexpected method selector)",
            {"selector": s[SELECTOR_SLICE], "expected_selector": TRANSFER_SELECTOR},
        )
    if not ARGUMENTS_RE.fullmatch(s, 10):
        raise NotATransfer("Tx isn't an ERC20 transfer (non-hex arguments)", {})
    to = Web3.to_checksum_address("0x" + s[RECIPIENT_SLICE])
    amount = int(s[AMOUNT_SLICE], 16)
    return to, amount


def encode_transfer_calldata(to: str, amount: Any) -> str:
    """
    Inverse of decode_transfer_calldata: selector + ABI-encoded (address, uint256).
    """
    value = parse_amount(amount)
    if value >= 2**256:
        raise ValueError("amount does not fit in uint256")
    args = encode(["address", "uint256"], [Web3.to_checksum_address(to), value])
    return "0x" + TRANSFER_SELECTOR + args.hex()
