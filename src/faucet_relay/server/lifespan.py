import logging
from contextlib import asynccontextmanager

from anyio import create_task_group, sleep
from fastapi import FastAPI

from faucet_relay.lock_store import LockStore

_logger = logging.getLogger(__name__)


class Lifespan(object):
    def __init__(self, lock_store: LockStore, purge_interval: int) -> None:
        self.lock_store = lock_store
        self.purge_interval = purge_interval

    async def _purge_expired_locks(self):
        while True:
            await sleep(self.purge_interval)
            try:
                await self.lock_store.purge_expired()
            except Exception as e:
                _logger.error("purge expired locks error")
                _logger.exception(e)

    @asynccontextmanager
    async def run(self, app: FastAPI):
        async with create_task_group() as tg:
            tg.start_soon(self._purge_expired_locks)
            yield
            tg.cancel_scope.cancel()
