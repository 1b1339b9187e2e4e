from .claim import ClaimReceipt, ClaimRequest, ClaimResponse
from .lock import LockKind, LockRecord

__all__ = [
    "ClaimRequest",
    "ClaimReceipt",
    "ClaimResponse",
    "LockKind",
    "LockRecord",
]
