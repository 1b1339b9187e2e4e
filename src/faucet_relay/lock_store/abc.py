import hashlib
import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from faucet_relay.models import LockKind, LockRecord

__all__ = ["LockStore", "subject_key", "now_ms"]


def subject_key(identifier: str, network: str) -> str:
    data = f"{identifier}|{network}".encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def now_ms() -> int:
    return int(time.time() * 1000)


def new_record(
    identifier: str,
    network: str,
    kind: LockKind,
    ttl: float,
    metadata: Optional[Dict[str, Any]] = None,
) -> LockRecord:
    now = now_ms()
    return LockRecord(
        subject_key=subject_key(identifier, network),
        kind=kind,
        lock_id=secrets.token_hex(8),
        first_seen_at=now,
        expires_at=now + int(ttl * 1000),
        metadata=metadata or {},
    )


def extended(record: LockRecord, ttl: float) -> LockRecord:
    return record.model_copy(update={"expires_at": now_ms() + int(ttl * 1000)})


class LockStore(ABC):
    """
    Expiring lock records keyed by (client identifier, network).

    Records are expired lazily: a read that finds an expired record treats it
    as absent and removes it. Writes are best-effort, implementations log and
    swallow storage failures instead of raising them.
    """

    @abstractmethod
    async def load(
        self, identifier: str, network: str, kind: LockKind
    ) -> Optional[LockRecord]: ...

    @abstractmethod
    async def set(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        ttl: float,
        metadata: Optional[Dict[str, Any]] = None,
    ): ...

    @abstractmethod
    async def acquire(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        ttl: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[LockRecord]:
        """
        Create the record only if no live record of this kind exists.

        Return the new record, or None when another live record holds the lock.
        The record's ``lock_id`` is what ``refresh`` and ``clear`` match against.
        """

    @abstractmethod
    async def refresh(
        self, identifier: str, network: str, kind: LockKind, lock_id: str, ttl: float
    ) -> bool:
        """
        Push the expiry of a held record to ``ttl`` seconds from now.

        Return False when the record has expired or is held by someone else.
        """

    @abstractmethod
    async def clear(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        lock_id: Optional[str] = None,
    ):
        """Remove the record. With ``lock_id``, only a record holding that id is removed."""

    @abstractmethod
    async def purge_expired(self) -> int: ...

    async def get_remaining(self, identifier: str, network: str, kind: LockKind) -> int:
        """Milliseconds until the record expires, 0 if there is no live record."""
        record = await self.load(identifier, network, kind)
        if record is None:
            return 0
        return record.remaining(now_ms())
