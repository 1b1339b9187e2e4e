import pytest
from fastapi.testclient import TestClient

from faucet_relay.captcha import MockCaptchaVerifier
from faucet_relay.chain import ChainRegistry, MockFaucetChain, set_chains
from faucet_relay.claim import ClaimService, set_claim_service
from faucet_relay.config import Config, set_config
from faucet_relay.lock_store import MemoryLockStore
from faucet_relay.server import Server


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture
def privkeys():
    return [
        "0xa627246a109551432ac5db6535566af34fdddfaa11df17b8afd53eb987e209a2",
        "0xb171f296622b98cbdc08dcdcb0696f738c3a22d9d367c657117cd3c8d0b71d42",
    ]


@pytest.fixture
def recipient():
    return "0x577887519278199ce8F8D80bAcc70fc32b48daD4"


@pytest.fixture
def lock_store():
    return MemoryLockStore()


@pytest.fixture
def captcha():
    return MockCaptchaVerifier(valid_tokens=["valid-token"])


@pytest.fixture
def sepolia():
    return MockFaucetChain(network="sepolia")


@pytest.fixture
def amoy():
    return MockFaucetChain(
        network="amoy", contract_address="0x5aA6275BC3CB6e219Deb8e1bC07747FF5cDeF1B9"
    )


@pytest.fixture
def chains(sepolia: MockFaucetChain, amoy: MockFaucetChain):
    registry = ChainRegistry({"sepolia": sepolia, "amoy": amoy})
    set_chains(registry)
    return registry


@pytest.fixture
def service(lock_store, captcha, chains):
    service = ClaimService(
        lock_store=lock_store,
        captcha=captcha,
        chains=chains,
        pending_ttl=60,
        cooldown_ttl=24 * 60 * 60,
    )
    set_claim_service(service)
    return service


@pytest.fixture
def config():
    test_config = Config(trust_proxy=False)
    set_config(test_config)
    return test_config


@pytest.fixture
def client(config, service):
    client = TestClient(Server().app)
    yield client
    client.close()
