import logging
import signal
from typing import Optional

import anyio
from anyio import TASK_STATUS_IGNORED, Event, create_task_group, move_on_after, sleep
from anyio.abc import TaskGroup, TaskStatus

from faucet_relay import log
from faucet_relay.captcha import WebCaptchaVerifier
from faucet_relay.chain import ChainError, ChainRegistry, Web3FaucetChain, set_chains
from faucet_relay.claim import ClaimService, set_claim_service
from faucet_relay.config import get_config
from faucet_relay.lock_store import FileLockStore
from faucet_relay.server import Lifespan, Server

_logger = logging.getLogger(__name__)


class FaucetRunner(object):
    def __init__(self) -> None:
        self.config = get_config()

        log.init(self.config.log)
        _logger.debug("Logger init completed.")

        self._server: Optional[Server] = None
        self._chains: Optional[ChainRegistry] = None
        self._captcha: Optional[WebCaptchaVerifier] = None
        self._tg: Optional[TaskGroup] = None

        self._shutdown_event: Optional[Event] = None
        self._should_shutdown = False
        signal.signal(signal.SIGINT, self._shutdown_signal_handler)
        signal.signal(signal.SIGTERM, self._shutdown_signal_handler)

    def _shutdown_signal_handler(self, *args):
        self._should_shutdown = True

    async def _check_should_shutdown(self):
        while not self._should_shutdown:
            await sleep(0.1)
        self._set_shutdown_event()

    def _set_shutdown_event(self):
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def _wait_for_shutdown(self):
        if self._shutdown_event is not None:
            await self._shutdown_event.wait()
            await self._stop()

    async def _check_owner(self, chains: ChainRegistry):
        for chain in chains:
            if not isinstance(chain, Web3FaucetChain):
                continue
            try:
                owner = await chain.owner()
            except ChainError as e:
                _logger.warning(f"cannot read faucet owner on {chain.network}: {e}")
                continue
            if owner != chain.account:
                _logger.warning(
                    f"server account {chain.account} is not the owner of the faucet on {chain.network}, claims will be rejected"
                )

    async def run(self, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        assert self._tg is None, "Faucet relay is running"

        _logger.info("Starting faucet relay")

        self._shutdown_event = Event()

        lock_store = FileLockStore(self.config.lock.dir)
        _logger.info(f"Lock store at {self.config.lock.dir}")

        self._captcha = WebCaptchaVerifier(
            verify_url=self.config.captcha.verify_url,
            secret=self.config.captcha.secret,
            timeout=self.config.captcha.timeout,
        )

        self._chains = ChainRegistry.from_config(self.config)
        set_chains(self._chains)
        _logger.info(f"Supported networks: {', '.join(self._chains.networks)}")

        service = ClaimService(
            lock_store=lock_store,
            captcha=self._captcha,
            chains=self._chains,
            pending_ttl=self.config.lock.pending_ttl,
            cooldown_ttl=self.config.lock.cooldown_ttl,
            captcha_required=self.config.captcha.required,
            cooldown_scope=self.config.lock.cooldown_scope,
        )
        set_claim_service(service)

        lifespan = Lifespan(lock_store, self.config.lock.purge_interval)
        self._server = Server(self.config.cors_origins, lifespan)
        _logger.info("Web server init completed.")

        try:
            async with create_task_group() as tg:
                self._tg = tg

                tg.start_soon(self._check_should_shutdown)
                tg.start_soon(self._wait_for_shutdown)
                tg.start_soon(self._check_owner, self._chains)

                await tg.start(
                    self._server.start,
                    self.config.server_host,
                    self.config.server_port,
                    self.config.log.level == "DEBUG",
                )
                _logger.info(
                    f"Faucet relay running on {self.config.server_host}:{self.config.server_port}"
                )
                task_status.started()
        finally:
            with move_on_after(5, shield=True):
                await self._chains.close()
                await self._captcha.close()
            self._shutdown_event = None
            self._tg = None
            _logger.info("Faucet relay stopped")

    async def _stop(self):
        _logger.info("Stopping faucet relay")
        if self._tg is None:
            return

        if self._server is not None:
            self._server.stop()
        self._tg.cancel_scope.cancel()

    async def stop(self):
        self._set_shutdown_event()


def run():
    try:
        runner = FaucetRunner()
        anyio.run(runner.run)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
