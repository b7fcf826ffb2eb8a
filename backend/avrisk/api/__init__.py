from fastapi import APIRouter

from avrisk.api.routes import factors_router, opportunities_router, proxy_router

router = APIRouter()
router.include_router(factors_router)
router.include_router(opportunities_router)
router.include_router(proxy_router)

__all__ = ["router"]
