"""
Call service (protected API).
Bearer tokens validated by the identity authority on every request; calls are visible only to their owner.
Port 8080.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from call_service.accounts import router as accounts_router
from call_service.calls import router as calls_router
from call_service.database import init_db
from call_service.errors import CallServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    init_db()
    yield


app = FastAPI(title="Call Service", version="1.0.0", lifespan=lifespan)
app.include_router(accounts_router, tags=["accounts"])
app.include_router(calls_router, tags=["calls"])


@app.exception_handler(CallServiceError)
async def call_service_error_handler(request: Request, exc: CallServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Store or transport faults: log server-side, never echo the details."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "server_error", "error_description": "Internal error"}},
    )


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "call_service"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "call_service.main:app",
        host="127.0.0.1",
        port=8080,
        reload=True,
    )
