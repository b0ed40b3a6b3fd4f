from .base import SignedTx, Signer, WatchOnlySigner
from .intents import EvmTxIntent, build_evm_tx_intent

__all__ = [
    "SignedTx",
    "Signer",
    "WatchOnlySigner",
    "EvmTxIntent",
    "build_evm_tx_intent",
]
