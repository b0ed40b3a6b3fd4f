from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

ERC20_TRANSFER_PREFIX = "0xa9059cbb"


@dataclass(frozen=True)
class EvmTxIntent:
    """
    What an external signer is being asked to sign, as flat typed fields.

    For token transfers `to` is the contract; the beneficiary and the token
    amount travel separately in `recipient` / `token_amount`.
    """

    intent_type: str  # "erc20_transfer" or "evm_transaction"
    chain_id: Optional[int]
    to: Optional[str]
    value_wei: Optional[int]
    data_hex: Optional[str]
    gas: Optional[int]
    gas_price_wei: Optional[int]
    nonce: Optional[int]
    recipient: Optional[str] = None
    token_amount: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _quantity(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    s = str(x).strip()
    try:
        return int(s, 16) if s.lower().startswith("0x") else int(s)
    except ValueError:
        return None


def build_evm_tx_intent(
    tx: Dict[str, Any],
    *,
    chain_id: int | None,
    recipient: Optional[str] = None,
    token_amount: Optional[int] = None,
) -> EvmTxIntent:
    """
    Describe a web3-style tx dict for a signer.

    Call data starting with the `transfer` selector marks an ERC20 transfer.
    """
    data_hex = str(tx["data"]) if tx.get("data") is not None else None
    is_transfer = bool(data_hex) and data_hex.lower().startswith(ERC20_TRANSFER_PREFIX)
    to = tx.get("to")

    return EvmTxIntent(
        intent_type="erc20_transfer" if is_transfer else "evm_transaction",
        chain_id=int(chain_id) if chain_id is not None else _quantity(tx.get("chainId")),
        to=str(to) if to is not None else None,
        value_wei=_quantity(tx.get("value")),
        data_hex=data_hex,
        gas=_quantity(tx.get("gas")),
        gas_price_wei=_quantity(tx.get("gasPrice")),
        nonce=_quantity(tx.get("nonce")),
        recipient=recipient if is_transfer else None,
        token_amount=token_amount if is_transfer else None,
    )
