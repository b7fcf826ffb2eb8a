from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from avrisk import __version__
from avrisk.api import router
from avrisk.core import get_logger, settings
from avrisk.core.exceptions import (
    InvalidUpstreamShapeError,
    OpportunityNotFoundError,
    RMSConfigurationError,
    UpstreamServiceError,
)
from risk_engine.score_calculator import InvalidSelectionError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    mode = "live" if settings.rms_configured else "demo"
    logger.info(f"Starting AV risk dashboard [{settings.app_env}] ({mode} data)")
    yield
    logger.info("Stopping AV risk dashboard")


app = FastAPI(
    title="AV Risk Assessment Dashboard",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidSelectionError)
async def invalid_selection_handler(request: Request, exc: InvalidSelectionError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "factor": exc.factor_key},
    )


@app.exception_handler(OpportunityNotFoundError)
async def not_found_handler(request: Request, exc: OpportunityNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(UpstreamServiceError)
async def upstream_error_handler(request: Request, exc: UpstreamServiceError):
    logger.error(f"Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": exc.upstream_message, "upstream_status": exc.status_code},
    )


@app.exception_handler(InvalidUpstreamShapeError)
async def upstream_shape_handler(request: Request, exc: InvalidUpstreamShapeError):
    logger.error(f"Unexpected upstream payload on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": exc.message})


@app.exception_handler(RMSConfigurationError)
async def configuration_error_handler(request: Request, exc: RMSConfigurationError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Server configuration error: {exc.message}"},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Routes
app.include_router(router, prefix="/api", tags=["Risk"])


@app.get("/health")
async def health_check():
    return {"status": "ok", "env": settings.app_env, "rms_configured": settings.rms_configured}
