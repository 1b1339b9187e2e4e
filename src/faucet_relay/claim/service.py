import logging
import math
import time
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from anyio import create_task_group, move_on_after, sleep
from web3 import Web3

from faucet_relay.captcha import CaptchaVerifier
from faucet_relay.chain import (
    ChainError,
    ChainRegistry,
    ChainRejected,
    FaucetChain,
    RevertReason,
    TransportError,
)
from faucet_relay.config import CooldownScope
from faucet_relay.lock_store import LockStore
from faucet_relay.models import ClaimReceipt, ClaimRequest, LockKind

from .exceptions import (
    CaptchaRejected,
    ChainCooldownActive,
    ClaimFailed,
    InvalidClaimRequest,
    RateLimited,
)

_logger = logging.getLogger(__name__)

# network part of the pending lock key, one client holds one pending claim in total
ALL_NETWORKS = "*"

T = TypeVar("T")


def _wait_seconds(remaining_ms: int) -> int:
    return math.ceil(remaining_ms / 1000)


class ClaimService(object):
    """
    Runs one claim: captcha, local locks, pending lock, dispatch, cooldown lock.

    The pending lock is held for the whole dispatch, kept alive while the
    transaction waits for confirmation, and released on every exit path.
    A successful dispatch leaves a cooldown lock behind instead.
    """

    def __init__(
        self,
        lock_store: LockStore,
        captcha: CaptchaVerifier,
        chains: ChainRegistry,
        pending_ttl: float = 60,
        cooldown_ttl: float = 24 * 60 * 60,
        captcha_required: bool = True,
        cooldown_scope: CooldownScope = "client",
    ) -> None:
        self.lock_store = lock_store
        self.captcha = captcha
        self.chains = chains
        self.pending_ttl = pending_ttl
        self.cooldown_ttl = cooldown_ttl
        self.captcha_required = captcha_required
        self.cooldown_scope = cooldown_scope

    async def _check_captcha(self, request: ClaimRequest):
        if not request.captcha_token:
            raise CaptchaRejected()
        if not await self.captcha.verify(request.captcha_token, request.client_id):
            _logger.info(f"captcha rejected for client {request.client_id}")
            raise CaptchaRejected()

    async def _check_locks(self, client_id: str, network: str):
        if self.cooldown_scope == "network":
            networks = [network]
        else:
            networks = self.chains.networks

        remaining = 0
        for n in networks:
            remaining = max(
                remaining,
                await self.lock_store.get_remaining(client_id, n, LockKind.Cooldown),
            )
        if remaining > 0:
            wait = _wait_seconds(remaining)
            _logger.info(f"client {client_id} is in cooldown, wait {wait} seconds")
            raise RateLimited(wait)

        remaining = await self.lock_store.get_remaining(
            client_id, ALL_NETWORKS, LockKind.Pending
        )
        if remaining > 0:
            wait = _wait_seconds(remaining)
            _logger.info(f"client {client_id} has a claim in flight, wait {wait} seconds")
            raise RateLimited(wait)

    @asynccontextmanager
    async def _pending_lock(self, client_id: str, metadata: Dict[str, Any]):
        record = await self.lock_store.acquire(
            client_id, ALL_NETWORKS, LockKind.Pending, self.pending_ttl, metadata
        )
        if record is None:
            remaining = await self.lock_store.get_remaining(
                client_id, ALL_NETWORKS, LockKind.Pending
            )
            raise RateLimited(max(1, _wait_seconds(remaining)))

        try:
            yield record.lock_id
        finally:
            with move_on_after(5, shield=True):
                await self.lock_store.clear(
                    client_id, ALL_NETWORKS, LockKind.Pending, record.lock_id
                )

    async def _keep_pending(self, client_id: str, lock_id: str):
        while True:
            await sleep(self.pending_ttl / 3)
            if not await self.lock_store.refresh(
                client_id, ALL_NETWORKS, LockKind.Pending, lock_id, self.pending_ttl
            ):
                _logger.warning(f"pending lock of client {client_id} is lost")
                return

    async def _holding_pending(
        self,
        client_id: str,
        lock_id: str,
        func: Callable[..., Awaitable[T]],
        *args,
    ) -> T:
        result: Optional[T] = None
        error: Optional[Exception] = None
        async with create_task_group() as tg:
            tg.start_soon(self._keep_pending, client_id, lock_id)
            try:
                result = await func(*args)
            except Exception as e:
                error = e
            finally:
                tg.cancel_scope.cancel()

        if error is not None:
            raise error
        assert result is not None
        return result

    async def _chain_cooldown_wait(self, chain: FaucetChain, recipient: str) -> int:
        try:
            last = await chain.last_claim_timestamp(recipient)
            cooldown = await chain.cooldown_seconds()
        except ChainError as e:
            raise ClaimFailed(e.message) from e
        return max(0, last + cooldown - int(time.time()))

    async def _dispatch(
        self, chain: FaucetChain, client_id: str, recipient: str
    ) -> ClaimReceipt:
        network = chain.network
        try:
            amount = await chain.claim_amount()
            _logger.info(
                f"Attempting to send {Web3.from_wei(amount, 'ether')} native to {recipient} on {network}"
            )
        except ChainError as e:
            _logger.warning(f"cannot read claim amount on {network}: {e}")

        try:
            receipt = await chain.dispatch_claim(recipient)
        except ChainRejected as e:
            if e.reason == RevertReason.CooldownActive:
                wait = await self._chain_cooldown_wait(chain, recipient)
                _logger.info(f"Claim for {recipient} on {network} blocked, wait {wait} seconds")
                raise ChainCooldownActive(wait) from e
            _logger.error(f"Claim for {recipient} on {network} rejected: {e.message}")
            raise ClaimFailed(e.message) from e
        except TransportError as e:
            _logger.error(f"Claim for {recipient} on {network} failed: {e}")
            raise ClaimFailed(e.message) from e

        _logger.info(f"Transaction confirmed on {network}: {receipt.tx_hash}")
        await self.lock_store.set(
            client_id,
            network,
            LockKind.Cooldown,
            self.cooldown_ttl,
            {"recipient": recipient, "network": network, "txHash": receipt.tx_hash},
        )
        return receipt

    async def claim(self, request: ClaimRequest) -> ClaimReceipt:
        _logger.info(
            f"Received claim request: network={request.network}, recipient={request.recipient}, client={request.client_id}"
        )
        if self.captcha_required:
            await self._check_captcha(request)

        if request.network not in self.chains:
            raise InvalidClaimRequest("Invalid network")
        chain = self.chains.get(request.network)

        await self._check_locks(request.client_id, request.network)

        metadata = {"recipient": request.recipient, "network": request.network}
        async with self._pending_lock(request.client_id, metadata) as lock_id:
            if not Web3.is_address(request.recipient):
                raise InvalidClaimRequest("Invalid recipient address")
            recipient = Web3.to_checksum_address(request.recipient)
            return await self._holding_pending(
                request.client_id,
                lock_id,
                self._dispatch,
                chain,
                request.client_id,
                recipient,
            )
