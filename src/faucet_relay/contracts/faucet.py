from typing import TYPE_CHECKING, Optional

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.contract import AsyncContract
from web3.types import TxParams, TxReceipt

from .signer import FaucetSigner
from .utils import catch_tx_revert_error, read_abi, wait_for_receipt

if TYPE_CHECKING:
    from faucet_relay.config import TxOption

__all__ = ["FaucetContract"]


class FaucetContract(object):
    """Calls on one deployed NativeFaucet, sent from the faucet owner account."""

    def __init__(
        self,
        signer: FaucetSigner,
        address: ChecksumAddress,
        default_option: "Optional[TxOption]" = None,
    ):
        self.signer = signer
        self.abi = read_abi("NativeFaucet")
        self._address = address
        self._default_option = default_option

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    async def _contract(self) -> AsyncContract:
        w3 = await self.signer.get()
        return w3.eth.contract(address=self._address, abi=self.abi)

    async def claim_amount(self) -> int:
        contract = await self._contract()
        return await contract.functions.claimAmount().call()

    async def cooldown(self) -> int:
        contract = await self._contract()
        return await contract.functions.cooldown().call()

    async def last_claim(self, account: ChecksumAddress) -> int:
        contract = await self._contract()
        return await contract.functions.lastClaim(account).call()

    async def paused(self) -> bool:
        contract = await self._contract()
        return await contract.functions.paused().call()

    async def owner(self) -> ChecksumAddress:
        contract = await self._contract()
        return await contract.functions.owner().call()

    async def admin_claim_for(
        self, recipient: ChecksumAddress, option: "Optional[TxOption]" = None
    ) -> HexBytes:
        """Send ``adminClaimFor(recipient)`` and return its hash without waiting."""
        contract = await self._contract()

        opt: TxParams = {}
        if option is not None:
            opt.update(**option)
        elif self._default_option is not None:
            opt.update(**self._default_option)
        opt["from"] = self.signer.account

        async with self.signer.next_nonce() as nonce:
            opt["nonce"] = nonce
            async with catch_tx_revert_error("adminClaimFor"):
                return await contract.functions.adminClaimFor(recipient).transact(opt)

    async def wait_claim(self, tx_hash: HexBytes, timeout: float = 120) -> TxReceipt:
        w3 = await self.signer.get()
        return await wait_for_receipt(w3, "adminClaimFor", tx_hash, timeout)
