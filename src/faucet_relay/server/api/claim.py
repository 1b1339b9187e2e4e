import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Annotated

from faucet_relay.claim import ClaimError
from faucet_relay.models import ClaimRequest, ClaimResponse

from ..depends import ClaimServiceDep, ClientIdDep

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/claim")


class ClaimInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # missing or null fields are left to the claim service to reject with a
    # readable message
    network: str = ""
    recipient: str = ""
    captcha_token: Optional[str] = Field(default=None, alias="captchaToken")

    @field_validator("network", "recipient", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v


def _error_response(status_code: int, error: str, wait: Optional[int] = None):
    resp = ClaimResponse(success=False, error=error, wait=wait)
    return JSONResponse(
        status_code=status_code,
        content=resp.model_dump(by_alias=True, exclude_none=True),
    )


async def invalid_body_handler(request: Request, exc: RequestValidationError):
    _logger.info(f"invalid request body on {request.url.path}: {exc.errors()}")
    return _error_response(400, "Invalid request body")


@router.post("", response_model=ClaimResponse, response_model_exclude_none=True)
async def claim(
    input: Annotated[ClaimInput, Body()],
    *,
    client_id: ClientIdDep,
    service: ClaimServiceDep,
):
    request = ClaimRequest(
        network=input.network,
        recipient=input.recipient,
        captcha_token=input.captcha_token,
        client_id=client_id,
    )
    try:
        receipt = await service.claim(request)
    except ClaimError as e:
        return _error_response(e.status_code, e.message, e.wait)
    except Exception as e:
        _logger.error(f"Claim failed: {e}")
        _logger.exception(e)
        return _error_response(500, str(e))

    return ClaimResponse(success=True, tx_hash=receipt.tx_hash)
