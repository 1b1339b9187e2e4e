from fastapi import APIRouter

from .claim import invalid_body_handler
from .claim import router as claim_router
from .network import router as network_router

__all__ = ["router", "invalid_body_handler"]

router = APIRouter()
router.include_router(claim_router)
router.include_router(network_router)
