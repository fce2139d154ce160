"""
instant_transfer/app.py

FastAPI application entrypoint for the instant-transfer service.

This module wires together:
- Logging configuration (file-based under logs/)
- CORS and basic middleware
- Error rendering as {"error": ...} bodies
- Domain routers under api/ (transfers, accounts, partner banks, admin)
- The background settlement worker
"""

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from instant_transfer import __version__, config
from instant_transfer.db.session import AsyncSessionLocal, Base, engine
from instant_transfer.logging_config import get_logger, setup_logging
from instant_transfer.settlement import SettlementWorker
from instant_transfer.api.accounts import router as accounts_router
from instant_transfer.api.admin import router as admin_router
from instant_transfer.api.banks import router as banks_router
from instant_transfer.api.transfers import router as transfers_router

# Configure logging before creating the app
setup_logging()
logger = get_logger("instant_transfer")

app = FastAPI(title="Instant Transfer API", version=__version__)

# CORS (open for demo)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

settlement_worker = SettlementWorker(AsyncSessionLocal, poll_seconds=config.SETTLEMENT_POLL_SECONDS)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Lightweight request logger to help trace transfer traffic.
    """
    try:
        body = await request.body()
        logger.info(
            "HTTP %s %s from %s body=%s",
            request.method,
            request.url.path,
            request.client.host if request.client else "?",
            body.decode(errors="ignore")[:200],
        )
    except Exception:
        logger.exception("Failed to read request body for logging")
    response = await call_next(request)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": jsonable_encoder(exc.errors())})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.get("/api/health")
async def health():
    """
    Simple health check endpoint.
    """
    return {"status": "healthy"}


# Log effective DB URL once at import time
logger.info("Effective DATABASE_URL: %s", engine.url.render_as_string(hide_password=True))

# Include domain routers
app.include_router(transfers_router, prefix="/api")
app.include_router(accounts_router, prefix="/api")
app.include_router(banks_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.on_event("startup")
async def on_startup():
    logger.info("Instant-transfer starting up")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if config.SETTLEMENT_WORKER_ENABLED:
        settlement_worker.start()


@app.on_event("shutdown")
async def on_shutdown():
    try:
        await settlement_worker.stop()
    except Exception:
        logger.exception("Error stopping settlement worker on shutdown")
    try:
        await engine.dispose()
    except Exception:
        logger.exception("Error disposing engine on shutdown")
    logger.info("Instant-transfer shutting down")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("instant_transfer.app:app", host="0.0.0.0", port=8000)
