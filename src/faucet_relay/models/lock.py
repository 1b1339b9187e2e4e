from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel


class LockKind(str, Enum):
    Pending = "pending"
    Cooldown = "cooldown"


class LockRecord(BaseModel):
    subject_key: str
    kind: LockKind
    # identifies the holder, drawn when the record is created
    lock_id: str = ""
    # milliseconds since epoch
    first_seen_at: int
    expires_at: int
    metadata: Dict[str, Any] = {}

    def remaining(self, now: int) -> int:
        return max(0, self.expires_at - now)

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at
