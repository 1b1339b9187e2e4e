import logging
import ssl
from contextlib import asynccontextmanager
from typing import Optional

import certifi
from aiohttp import ClientSession, ClientTimeout, TCPConnector
from anyio import Lock, move_on_after
from eth_keys import keys
from eth_typing import ChecksumAddress
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder
from web3.providers.async_base import AsyncBaseProvider

_logger = logging.getLogger(__name__)


class FaucetSigner(object):
    """
    The faucet owner's connection to one network.

    A single ``AsyncWeb3`` is opened on first use and shared by every request on
    the network; it signs outgoing transactions locally with the owner key.
    Transactions take their nonce through ``next_nonce`` so that concurrent
    claims on one network never reuse a nonce.
    """

    def __init__(
        self,
        privkey: str,
        provider: Optional[AsyncBaseProvider] = None,
        provider_path: Optional[str] = None,
        timeout: float = 10,
    ) -> None:
        if privkey.startswith("0x"):
            privkey = privkey[2:]
        self._privkey = keys.PrivateKey(bytes.fromhex(privkey))
        self._account: ChecksumAddress = self._privkey.public_key.to_checksum_address()

        if provider is None:
            if provider_path is None:
                raise ValueError("provider and provider_path cannot be all None.")
            if not provider_path.startswith("http"):
                raise ValueError(f"unsupported provider {provider_path}")

        self._provider = provider
        self._provider_path = provider_path
        self._timeout = timeout

        self._w3: Optional[AsyncWeb3] = None
        self._session: Optional[ClientSession] = None
        self._connect_lock = Lock()
        self._nonce_lock = Lock()
        self._closed = False

    @property
    def account(self) -> ChecksumAddress:
        return self._account

    async def _connect(self) -> AsyncWeb3:
        if self._provider is not None:
            provider = self._provider
        else:
            assert self._provider_path is not None
            provider = AsyncHTTPProvider(self._provider_path)
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            self._session = ClientSession(
                timeout=ClientTimeout(self._timeout),
                connector=TCPConnector(ssl=ssl_context),
                trust_env=True,
            )
            await provider.cache_async_session(self._session)

        w3 = AsyncWeb3(provider)
        w3.middleware_onion.inject(
            SignAndSendRawMiddlewareBuilder.build(self._privkey), layer=0
        )
        return w3

    async def get(self) -> AsyncWeb3:
        assert not self._closed, "signer is closed"
        async with self._connect_lock:
            if self._w3 is None:
                self._w3 = await self._connect()
                _logger.debug(f"signer {self._account} connected")
        return self._w3

    @asynccontextmanager
    async def next_nonce(self):
        """Yield the next pending nonce; hold it until the transaction is sent."""
        w3 = await self.get()
        async with self._nonce_lock:
            nonce = await w3.eth.get_transaction_count(self._account, "pending")
            yield nonce

    async def close(self):
        if self._closed:
            return
        self._closed = True
        if self._session is not None and not self._session.closed:
            with move_on_after(5, shield=True):
                await self._session.close()
        self._w3 = None
        _logger.debug(f"signer {self._account} is closed")
