import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

from anyio import Path, to_thread

from faucet_relay.models import LockKind, LockRecord

from .abc import LockStore, extended, new_record, now_ms, subject_key

_logger = logging.getLogger(__name__)


def _dump_record(record: LockRecord) -> str:
    data: Dict[str, Any] = dict(record.metadata)
    data["lockId"] = record.lock_id
    data["firstSeenAt"] = record.first_seen_at
    data["expiresAt"] = record.expires_at
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def _load_record(key: str, kind: LockKind, content: str) -> LockRecord:
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("lock record must be a JSON object")
    lock_id = data.pop("lockId", "")
    first_seen_at = data.pop("firstSeenAt")
    expires_at = data.pop("expiresAt")
    return LockRecord(
        subject_key=key,
        kind=kind,
        lock_id=lock_id,
        first_seen_at=first_seen_at,
        expires_at=expires_at,
        metadata=data,
    )


def _write_tmp(dirname: str, content: str) -> str:
    fd, tmp_path = tempfile.mkstemp(dir=dirname, suffix=".tmp")
    with os.fdopen(fd, mode="w", encoding="utf-8") as f:
        f.write(content)
    return tmp_path


def _replace_file(dirname: str, path: str, content: str):
    tmp_path = _write_tmp(dirname, content)
    try:
        os.replace(tmp_path, path)
    except OSError:
        os.unlink(tmp_path)
        raise


def _create_file(dirname: str, path: str, content: str):
    # link fails with FileExistsError when the target exists, and readers never
    # see a partially written record
    tmp_path = _write_tmp(dirname, content)
    try:
        os.link(tmp_path, path)
    finally:
        os.unlink(tmp_path)


class FileLockStore(LockStore):
    def __init__(self, dirname: str) -> None:
        self.dirname = dirname
        os.makedirs(dirname, exist_ok=True)

    def _path(self, key: str, kind: LockKind) -> Path:
        return Path(self.dirname) / f"{kind.value}-{key}.json"

    async def _unlink(self, path: Path):
        try:
            await path.unlink(missing_ok=True)
        except OSError as e:
            _logger.error(f"cannot remove lock file {path}: {e}")

    async def _read(self, key: str, kind: LockKind) -> Optional[LockRecord]:
        path = self._path(key, kind)
        try:
            content = await path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            _logger.error(f"cannot read lock file {path}: {e}")
            return None

        try:
            record = _load_record(key, kind, content)
        except (ValueError, KeyError) as e:
            _logger.warning(f"drop corrupted lock file {path}: {e}")
            await self._unlink(path)
            return None

        if record.is_expired(now_ms()):
            await self._unlink(path)
            return None
        return record

    async def load(
        self, identifier: str, network: str, kind: LockKind
    ) -> Optional[LockRecord]:
        return await self._read(subject_key(identifier, network), kind)

    async def _write(self, record: LockRecord):
        path = self._path(record.subject_key, record.kind)
        try:
            await to_thread.run_sync(
                _replace_file, self.dirname, str(path), _dump_record(record)
            )
        except OSError as e:
            _logger.error(f"cannot write {record.kind.value} lock file {path}: {e}")

    async def set(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        ttl: float,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        await self._write(new_record(identifier, network, kind, ttl, metadata))

    async def acquire(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        ttl: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[LockRecord]:
        record = new_record(identifier, network, kind, ttl, metadata)
        path = self._path(record.subject_key, kind)
        content = _dump_record(record)

        # second attempt runs after an expired or corrupted record was dropped
        for _ in range(2):
            try:
                await to_thread.run_sync(_create_file, self.dirname, str(path), content)
                return record
            except FileExistsError:
                existing = await self._read(record.subject_key, kind)
                if existing is not None:
                    return None
            except OSError as e:
                _logger.error(f"cannot create {kind.value} lock file {path}: {e}")
                return record
        return None

    async def refresh(
        self, identifier: str, network: str, kind: LockKind, lock_id: str, ttl: float
    ) -> bool:
        record = await self._read(subject_key(identifier, network), kind)
        if record is None or record.lock_id != lock_id:
            return False
        await self._write(extended(record, ttl))
        return True

    async def clear(
        self,
        identifier: str,
        network: str,
        kind: LockKind,
        lock_id: Optional[str] = None,
    ):
        key = subject_key(identifier, network)
        if lock_id is not None:
            record = await self._read(key, kind)
            if record is None or record.lock_id != lock_id:
                return
        await self._unlink(self._path(key, kind))

    async def purge_expired(self) -> int:
        count = 0
        async for path in Path(self.dirname).glob("*.json"):
            kind_value, _, key = path.stem.partition("-")
            try:
                kind = LockKind(kind_value)
            except ValueError:
                continue
            if len(key) == 0:
                continue
            if (await self._read(key, kind)) is None:
                count += 1
        if count > 0:
            _logger.info(f"purged {count} expired lock records")
        return count
