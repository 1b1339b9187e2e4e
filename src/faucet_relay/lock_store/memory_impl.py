from typing import Any, Dict, Optional, Tuple

from faucet_relay.models import LockKind, LockRecord

from .abc import LockStore, extended, new_record, now_ms, subject_key


class MemoryLockStore(LockStore):
    def __init__(self) -> None:
        self._records: Dict[Tuple[LockKind, str], LockRecord] = {}

    async def load(
        self, identifier: str, network: str, kind: LockKind
    ) -> Optional[LockRecord]:
        key = (kind, subject_key(identifier, network))
        record = self._records.get(key)
        if record is not None and record.is_expired(now_ms()):
            del self._records[key]
            return None
        return record

    async def set(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        ttl: float,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        record = new_record(identifier, network, kind, ttl, metadata)
        self._records[(kind, record.subject_key)] = record

    async def acquire(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        ttl: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[LockRecord]:
        if (await self.load(identifier, network, kind)) is not None:
            return None
        record = new_record(identifier, network, kind, ttl, metadata)
        self._records[(kind, record.subject_key)] = record
        return record

    async def refresh(
        self, identifier: str, network: str, kind: LockKind, lock_id: str, ttl: float
    ) -> bool:
        record = await self.load(identifier, network, kind)
        if record is None or record.lock_id != lock_id:
            return False
        self._records[(kind, record.subject_key)] = extended(record, ttl)
        return True

    async def clear(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        lock_id: Optional[str] = None,
    ):
        key = (kind, subject_key(identifier, network))
        record = self._records.get(key)
        if record is None:
            return
        if lock_id is not None and record.lock_id != lock_id:
            return
        del self._records[key]

    async def purge_expired(self) -> int:
        now = now_ms()
        expired = [key for key, record in self._records.items() if record.is_expired(now)]
        for key in expired:
            del self._records[key]
        return len(expired)
