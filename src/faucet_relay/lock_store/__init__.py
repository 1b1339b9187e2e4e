from .abc import LockStore, subject_key
from .file_impl import FileLockStore
from .memory_impl import MemoryLockStore

__all__ = [
    "LockStore",
    "FileLockStore",
    "MemoryLockStore",
    "subject_key",
]
