from typing import Dict, Iterator, List, Mapping, Optional

from faucet_relay.config import Config

from .abc import FaucetChain
from .exceptions import ChainError, ChainRejected, RevertReason, TransportError
from .mock_impl import MockFaucetChain
from .web_impl import Web3FaucetChain

__all__ = [
    "FaucetChain",
    "Web3FaucetChain",
    "MockFaucetChain",
    "ChainError",
    "ChainRejected",
    "TransportError",
    "RevertReason",
    "ChainRegistry",
    "get_chains",
    "set_chains",
]


class ChainRegistry(object):
    """Network id to faucet adapter. Built once at start-up and never mutated."""

    def __init__(self, chains: Mapping[str, FaucetChain]) -> None:
        self._chains: Dict[str, FaucetChain] = dict(chains)
        self._closed = False

    @classmethod
    def from_config(cls, config: Config) -> "ChainRegistry":
        privkey = config.privkey
        assert len(privkey) > 0, "Owner private key has not been set."

        chains: Dict[str, FaucetChain] = {}
        for network, network_config in config.networks.items():
            chains[network] = Web3FaucetChain(
                network=network,
                contract_address=network_config.contract,
                privkey=privkey,
                provider_path=network_config.provider,
                rpc_timeout=config.rpc_timeout,
                tx_timeout=config.tx_timeout,
                tx_option=network_config.tx_option(),
            )
        return cls(chains)

    @property
    def networks(self) -> List[str]:
        return list(self._chains.keys())

    def __contains__(self, network: object) -> bool:
        return network in self._chains

    def __iter__(self) -> Iterator[FaucetChain]:
        return iter(self._chains.values())

    def get(self, network: str) -> FaucetChain:
        if network not in self._chains:
            raise KeyError(f"unsupported network {network}")
        return self._chains[network]

    async def close(self):
        if not self._closed:
            for chain in self._chains.values():
                await chain.close()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self.close()


_default_chains: Optional[ChainRegistry] = None


def get_chains() -> ChainRegistry:
    assert _default_chains is not None, "ChainRegistry has not been set."

    return _default_chains


def set_chains(chains: ChainRegistry):
    global _default_chains

    _default_chains = chains
