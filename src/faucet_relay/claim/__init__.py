from typing import Optional

from .exceptions import (
    CaptchaRejected,
    ChainCooldownActive,
    ClaimError,
    ClaimFailed,
    InvalidClaimRequest,
    RateLimited,
)
from .service import ALL_NETWORKS, ClaimService

__all__ = [
    "ClaimService",
    "ALL_NETWORKS",
    "ClaimError",
    "InvalidClaimRequest",
    "CaptchaRejected",
    "RateLimited",
    "ChainCooldownActive",
    "ClaimFailed",
    "get_claim_service",
    "set_claim_service",
]


_default_claim_service: Optional[ClaimService] = None


def get_claim_service() -> ClaimService:
    assert _default_claim_service is not None, "ClaimService has not been set."

    return _default_claim_service


def set_claim_service(service: ClaimService):
    global _default_claim_service

    _default_claim_service = service
