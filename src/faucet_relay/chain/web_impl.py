import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional

from aiohttp import ClientError
from anyio import fail_after
from eth_utils.exceptions import ValidationError as EthValidationError
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception
from web3.providers.async_base import AsyncBaseProvider

from faucet_relay.contracts import (
    FaucetContract,
    FaucetSigner,
    TxRevertedError,
    get_revert_reason,
)
from faucet_relay.models import ClaimReceipt

from .abc import FaucetChain
from .exceptions import ChainRejected, RevertReason, TransportError

if TYPE_CHECKING:
    from faucet_relay.config import TxOption

_logger = logging.getLogger(__name__)


class Web3FaucetChain(FaucetChain):
    def __init__(
        self,
        network: str,
        contract_address: str,
        privkey: str,
        provider: Optional[AsyncBaseProvider] = None,
        provider_path: Optional[str] = None,
        rpc_timeout: int = 30,
        tx_timeout: float = 120,
        tx_option: "Optional[TxOption]" = None,
    ) -> None:
        self._network = network
        self.rpc_timeout = rpc_timeout
        self.tx_timeout = tx_timeout

        self.signer = FaucetSigner(
            privkey=privkey,
            provider=provider,
            provider_path=provider_path,
            timeout=rpc_timeout,
        )
        self.contract = FaucetContract(
            self.signer, Web3.to_checksum_address(contract_address), tx_option
        )

    @property
    def network(self) -> str:
        return self._network

    @property
    def contract_address(self) -> str:
        return self.contract.address

    @property
    def account(self) -> str:
        return self.signer.account

    @asynccontextmanager
    async def _wrap_errors(self, method: str, timeout: float):
        try:
            with fail_after(timeout):
                yield
        except TxRevertedError as e:
            raise ChainRejected(
                method, RevertReason.from_message(e.reason), e.reason
            ) from e
        except ContractLogicError as e:
            reason = get_revert_reason(e)
            raise ChainRejected(method, RevertReason.from_message(reason), reason) from e
        except (
            TimeoutError,
            ClientError,
            OSError,
            Web3Exception,
            EthValidationError,
        ) as e:
            # failed before the contract gave a verdict
            message = str(e) or type(e).__name__
            raise TransportError(method, message) from e

    async def balance(self) -> int:
        async with self._wrap_errors("getBalance", self.rpc_timeout):
            w3 = await self.signer.get()
            return await w3.eth.get_balance(self.contract.address)

    async def claim_amount(self) -> int:
        async with self._wrap_errors("claimAmount", self.rpc_timeout):
            return await self.contract.claim_amount()

    async def cooldown_seconds(self) -> int:
        async with self._wrap_errors("cooldown", self.rpc_timeout):
            return await self.contract.cooldown()

    async def last_claim_timestamp(self, address: str) -> int:
        async with self._wrap_errors("lastClaim", self.rpc_timeout):
            return await self.contract.last_claim(Web3.to_checksum_address(address))

    async def paused(self) -> bool:
        async with self._wrap_errors("paused", self.rpc_timeout):
            return await self.contract.paused()

    async def owner(self) -> str:
        async with self._wrap_errors("owner", self.rpc_timeout):
            return await self.contract.owner()

    async def dispatch_claim(self, recipient: str) -> ClaimReceipt:
        recipient = Web3.to_checksum_address(recipient)
        async with self._wrap_errors(
            "adminClaimFor", self.rpc_timeout + self.tx_timeout
        ):
            tx_hash = await self.contract.admin_claim_for(recipient)
            _logger.info(
                f"[{self._network}] adminClaimFor({recipient}) sent, tx hash: {Web3.to_hex(tx_hash)}"
            )
            receipt = await self.contract.wait_claim(tx_hash, timeout=self.tx_timeout)
        return ClaimReceipt(tx_hash=Web3.to_hex(receipt["transactionHash"]))

    async def close(self):
        await self.signer.close()
