import pytest
from anyio import create_task_group, sleep
from eth_account import Account

from faucet_relay.chain import TransportError, Web3FaucetChain
from faucet_relay.contracts import FaucetSigner

pytestmark = pytest.mark.anyio


@pytest.fixture
def provider():
    from web3.providers.eth_tester import AsyncEthereumTesterProvider

    return AsyncEthereumTesterProvider()


async def test_signer(provider, privkeys):
    signer = FaucetSigner(privkey=privkeys[0], provider=provider)
    try:
        assert signer.account == Account.from_key(privkeys[0]).address

        w3 = await signer.get()
        assert await signer.get() is w3
        assert await w3.eth.get_balance(signer.account) == 0

        async with signer.next_nonce() as nonce:
            assert nonce == 0
    finally:
        await signer.close()


async def test_signer_nonce_is_serialized(provider, privkeys):
    signer = FaucetSigner(privkey=privkeys[0], provider=provider)
    holders = []

    async def _take(name: str):
        async with signer.next_nonce():
            holders.append(name)
            # nobody else may take a nonce while this one is held
            assert len(holders) == 1
            await sleep(0.01)
            holders.remove(name)

    try:
        async with create_task_group() as tg:
            for i in range(3):
                tg.start_soon(_take, f"claim-{i}")
    finally:
        await signer.close()


def test_signer_requires_provider(privkeys):
    with pytest.raises(ValueError):
        FaucetSigner(privkey=privkeys[0])
    with pytest.raises(ValueError):
        FaucetSigner(privkey=privkeys[0], provider_path="ipc:///tmp/geth.ipc")


async def test_missing_contract_is_transport_error(provider, privkeys):
    chain = Web3FaucetChain(
        network="tester",
        contract_address="0x9c33b5Ad90570262A4b49abAFf47e4Ef7DeC3c08",
        privkey=privkeys[0],
        provider=provider,
        rpc_timeout=10,
    )
    try:
        assert chain.account == Account.from_key(privkeys[0]).address
        assert await chain.balance() == 0
        with pytest.raises(TransportError):
            await chain.claim_amount()
        with pytest.raises(TransportError):
            await chain.paused()
    finally:
        await chain.close()
