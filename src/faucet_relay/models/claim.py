from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClaimRequest(BaseModel):
    network: str
    recipient: str
    captcha_token: Optional[str] = None
    client_id: str


class ClaimReceipt(BaseModel):
    tx_hash: str


class ClaimResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
    error: Optional[str] = None
    wait: Optional[int] = None
