from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from faucet_relay.chain import ChainError, FaucetChain

from ..depends import ChainsDep

router = APIRouter(prefix="/networks")


class NetworkInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    network: str
    contract: str
    claim_amount: Optional[int] = Field(default=None, alias="claimAmount")
    cooldown: Optional[int] = None
    balance: Optional[int] = None
    paused: Optional[bool] = None
    error: Optional[str] = None


async def _get_network_info(chain: FaucetChain) -> NetworkInfo:
    info = NetworkInfo(network=chain.network, contract=chain.contract_address)
    try:
        info.claim_amount = await chain.claim_amount()
        info.cooldown = await chain.cooldown_seconds()
        info.balance = await chain.balance()
        info.paused = await chain.paused()
    except ChainError as e:
        info.error = str(e)
    return info


@router.get("", response_model=List[NetworkInfo], response_model_exclude_none=True)
async def get_networks(*, chains: ChainsDep):
    return [await _get_network_info(chain) for chain in chains]
