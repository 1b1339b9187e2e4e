from fastapi import Depends, Request
from typing_extensions import Annotated

from faucet_relay.chain import ChainRegistry, get_chains
from faucet_relay.claim import ClaimService, get_claim_service
from faucet_relay.config import get_config

__all__ = ["ClaimServiceDep", "ChainsDep", "ClientIdDep"]


async def _get_claim_service():
    return get_claim_service()


async def _get_chains():
    return get_chains()


async def _get_client_id(request: Request) -> str:
    config = get_config()
    if config.trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        client_ip = forwarded.split(",")[0].strip()
        if len(client_ip) > 0:
            return client_ip
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


ClaimServiceDep = Annotated[ClaimService, Depends(_get_claim_service)]
ChainsDep = Annotated[ChainRegistry, Depends(_get_chains)]
ClientIdDep = Annotated[str, Depends(_get_client_id)]
