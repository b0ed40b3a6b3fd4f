from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Union

AmountLike = Union[int, str, Decimal]


@dataclass(frozen=True)
class BaseUnit:
    """
    Base-unit pair of a currency: the smallest unit's name and how many of
    them make one whole coin (e.g. ("wei", 10**18)).
    """

    name: str
    scale: int

    @classmethod
    def from_decimals(cls, name: str, decimals: int) -> "BaseUnit":
        if decimals < 0 or decimals > 255:
            raise ValueError("decimals out of range")
        return cls(name=name, scale=10**decimals)


def parse_amount(value: AmountLike) -> int:
    """
    Normalize an on-chain quantity to a non-negative int.

    Accepts ints, decimal or 0x-hex strings, and integral Decimals. Floats are
    refused outright: a 256-bit amount cannot round-trip through one.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"amount must be int, str or Decimal, not {type(value).__name__}")
    if isinstance(value, int):
        n = value
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError(f"amount must be integral, got {value}")
        n = int(value)
    elif isinstance(value, str):
        s = value.strip()
        if s.lower().startswith("0x"):
            try:
                n = int(s, 16)
            except ValueError as e:
                raise ValueError(f"invalid hex amount: {value!r}") from e
        else:
            try:
                d = Decimal(s)
            except InvalidOperation as e:
                raise ValueError(f"invalid amount: {value!r}") from e
            if not d.is_finite() or d != d.to_integral_value():
                raise ValueError(f"amount must be integral, got {value!r}")
            n = int(d)
    else:
        raise TypeError(f"unsupported amount type: {type(value).__name__}")
    if n < 0:
        raise ValueError("amount must be >= 0")
    return n


def to_hex_quantity(value: AmountLike) -> str:
    return hex(parse_amount(value))


def to_atomic(amount: Union[str, Decimal, int], decimals: int) -> int:
    """
    Human amount ("1.5") to base units; digits beyond `decimals` are truncated.
    """
    if decimals < 0 or decimals > 255:
        raise ValueError("decimals out of range")
    if isinstance(amount, float):
        raise TypeError("pass human amounts as str or Decimal, not float")
    try:
        d = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {amount!r}") from e
    if not d.is_finite() or d <= 0:
        raise ValueError("amount must be > 0")
    with localcontext() as ctx:
        ctx.prec = len(d.as_tuple().digits) + decimals + 2
        return int(d.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))
