from abc import ABC, abstractmethod

from faucet_relay.models import ClaimReceipt


class FaucetChain(ABC):
    @property
    @abstractmethod
    def network(self) -> str: ...

    @property
    @abstractmethod
    def contract_address(self) -> str: ...

    @abstractmethod
    async def balance(self) -> int:
        """Native balance held by the faucet contract, in wei."""

    @abstractmethod
    async def claim_amount(self) -> int: ...

    @abstractmethod
    async def cooldown_seconds(self) -> int: ...

    @abstractmethod
    async def last_claim_timestamp(self, address: str) -> int: ...

    @abstractmethod
    async def paused(self) -> bool: ...

    @abstractmethod
    async def dispatch_claim(self, recipient: str) -> ClaimReceipt:
        """
        Send ``adminClaimFor(recipient)`` signed by the server key and wait for
        the transaction to be confirmed.

        Raises ``ChainRejected`` when the contract reverts and
        ``TransportError`` when the chain cannot be reached in time.
        """

    @abstractmethod
    async def close(self): ...
