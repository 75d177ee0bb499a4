"""
Identity authority.
Accounts (register/login), HS256 token issuance and validation, audit log.
Port 9000.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from auth_service.accounts import router as accounts_router
from auth_service.audit import router as audit_router
from auth_service.database import init_db, SessionLocal
from auth_service.errors import AuthorityError
from auth_service.keys import get_signing_key
from auth_service.seed import seed_from_env
from auth_service.store import SqlAccountStore
from auth_service.validate import router as validate_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, load signing key, seed account from env on startup."""
    init_db()
    get_signing_key()
    db = SessionLocal()
    try:
        seed_from_env(SqlAccountStore(db))
    finally:
        db.close()
    yield


app = FastAPI(title="Auth Service", version="1.0.0", lifespan=lifespan)
app.include_router(accounts_router, tags=["accounts"])
app.include_router(validate_router, tags=["validate"])
app.include_router(audit_router)


@app.exception_handler(AuthorityError)
async def authority_error_handler(request: Request, exc: AuthorityError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Store or library faults: log server-side, never echo the details."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "server_error", "error_description": "Internal error"}},
    )


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "auth_service"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "auth_service.main:app",
        host="127.0.0.1",
        port=9000,
        reload=True,
    )
