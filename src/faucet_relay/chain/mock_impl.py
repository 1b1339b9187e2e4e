import secrets
import time
from typing import Dict, List, Optional

from anyio import sleep
from web3 import Web3

from faucet_relay.models import ClaimReceipt

from .abc import FaucetChain
from .exceptions import ChainRejected, RevertReason, TransportError


class MockFaucetChain(FaucetChain):
    """In-memory stand-in for a deployed faucet contract."""

    def __init__(
        self,
        network: str = "mock",
        contract_address: str = "0x9c33b5Ad90570262A4b49abAFf47e4Ef7DeC3c08",
        claim_amount: int = 10**16,
        cooldown: int = 24 * 60 * 60,
        balance: int = 10**18,
        dispatch_delay: float = 0,
    ) -> None:
        self._network = network
        self._contract_address = contract_address
        self._claim_amount = claim_amount
        self._cooldown = cooldown
        self._balance = balance
        self._paused = False
        self.dispatch_delay = dispatch_delay

        self.last_claims: Dict[str, int] = {}
        self.dispatched: List[str] = []
        # when set, every call fails as if the RPC endpoint were unreachable
        self.transport_error: Optional[str] = None

    @property
    def network(self) -> str:
        return self._network

    @property
    def contract_address(self) -> str:
        return self._contract_address

    def set_paused(self, paused: bool):
        self._paused = paused

    def _check_transport(self, method: str):
        if self.transport_error is not None:
            raise TransportError(method, self.transport_error)

    async def balance(self) -> int:
        self._check_transport("getBalance")
        return self._balance

    async def claim_amount(self) -> int:
        self._check_transport("claimAmount")
        return self._claim_amount

    async def cooldown_seconds(self) -> int:
        self._check_transport("cooldown")
        return self._cooldown

    async def last_claim_timestamp(self, address: str) -> int:
        self._check_transport("lastClaim")
        return self.last_claims.get(Web3.to_checksum_address(address), 0)

    async def paused(self) -> bool:
        self._check_transport("paused")
        return self._paused

    async def dispatch_claim(self, recipient: str) -> ClaimReceipt:
        method = "adminClaimFor"
        self._check_transport(method)
        if self.dispatch_delay > 0:
            await sleep(self.dispatch_delay)

        if not Web3.is_address(recipient):
            raise ChainRejected(method, RevertReason.InvalidRecipient, "Invalid recipient")
        recipient = Web3.to_checksum_address(recipient)
        if self._paused:
            raise ChainRejected(method, RevertReason.FaucetPaused, "Faucet paused")
        now = int(time.time())
        last = self.last_claims.get(recipient, 0)
        if last > 0 and now < last + self._cooldown:
            raise ChainRejected(
                method, RevertReason.CooldownActive, "Wait before next claim"
            )
        if self._balance < self._claim_amount:
            raise ChainRejected(method, RevertReason.FaucetEmpty, "Faucet empty")

        self._balance -= self._claim_amount
        self.last_claims[recipient] = now
        self.dispatched.append(recipient)
        return ClaimReceipt(tx_hash="0x" + secrets.token_hex(32))

    async def close(self):
        pass
