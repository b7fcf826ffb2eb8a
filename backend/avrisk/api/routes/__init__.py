"""API routers."""

from avrisk.api.routes.factors import router as factors_router
from avrisk.api.routes.opportunities import router as opportunities_router
from avrisk.api.routes.proxy import router as proxy_router

__all__ = ["factors_router", "opportunities_router", "proxy_router"]
