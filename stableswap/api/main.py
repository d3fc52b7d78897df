"""FastAPI application for the StableSwap pool service.

Note: Authentication of actors is intentionally not implemented here. The
``actor`` field is trusted and should be bound to a verified identity by
the gateway in front of this service.
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stableswap import __version__
from stableswap.api import settings
from stableswap.api.endpoints import router
from stableswap.errors import (
    NumericNonConvergence,
    PoolNotFound,
    ReentrancyError,
    StableSwapError,
    TransferFailed,
)
from stableswap.models import ErrorResponse

logger = structlog.get_logger()

# Maximum request body size (64 KB); pool requests are tiny
MAX_REQUEST_SIZE = 64 * 1024

app = FastAPI(
    title="StableSwap Pool",
    description="Three-asset StableSwap pool with share accounting",
    version=__version__,
)


def error_status(err: StableSwapError) -> int:
    """HTTP status for a pool error."""
    if isinstance(err, PoolNotFound):
        return 404
    if isinstance(err, (TransferFailed, ReentrancyError)):
        return 409
    if isinstance(err, NumericNonConvergence):
        return 500
    return 400


@app.exception_handler(StableSwapError)
async def handle_pool_error(request: Request, err: StableSwapError) -> JSONResponse:
    """Translate pool errors into an ErrorResponse body."""
    status = error_status(err)
    log = logger.error if status >= 500 else logger.info
    log(
        "pool_request_rejected",
        path=request.url.path,
        error=err.kind,
        detail=str(err),
        status=status,
    )
    body = ErrorResponse(error=err.kind, detail=str(err))
    return JSONResponse(status_code=status, content=body.model_dump())


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server (see stableswap.api.settings for configuration)."""
    uvicorn.run(
        "stableswap.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
