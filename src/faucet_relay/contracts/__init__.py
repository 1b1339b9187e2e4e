from .exceptions import TxRevertedError
from .faucet import FaucetContract
from .signer import FaucetSigner
from .utils import catch_tx_revert_error, get_revert_reason, read_abi, wait_for_receipt

__all__ = [
    "TxRevertedError",
    "FaucetContract",
    "FaucetSigner",
    "catch_tx_revert_error",
    "get_revert_reason",
    "read_abi",
    "wait_for_receipt",
]
