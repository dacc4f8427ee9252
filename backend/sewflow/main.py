"""Application entry point for the production order API service."""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text

from sewflow.api.routes.fabrics import router as fabrics_router
from sewflow.api.routes.orders import router as orders_router
from sewflow.api.routes.products import router as products_router
from sewflow.api.routes.seamstresses import router as seamstresses_router
from sewflow.core.config import settings
from sewflow.core.db import get_engine
from sewflow.core.errors import SewflowError
from sewflow.core.logging import setup_logging
from sewflow.core.middleware import BodySizeLimitMiddleware, RequestContextLogMiddleware
from sewflow.models import Base

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

app.add_middleware(RequestContextLogMiddleware)


def _cors_origins() -> list[str]:
    if settings.ENV == "prod":
        if not settings.CORS_ALLOWED_ORIGINS:
            raise RuntimeError("CORS_ALLOWED_ORIGINS must be configured for prod")
        return settings.CORS_ALLOWED_ORIGINS
    return settings.CORS_ALLOWED_ORIGINS or ["http://localhost:5173"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.exception_handler(SewflowError)
async def sewflow_error_handler(request: Request, exc: SewflowError) -> JSONResponse:
    logger.bind(
        path=str(request.url.path),
        error=type(exc).__name__,
        status=exc.status_code,
    ).info("request_rejected")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.on_event("startup")
async def startup_event():
    """Create missing tables when running against a development database."""
    if settings.STORAGE_BACKEND != "sql" or settings.ENV != "dev":
        return
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_ready")


@app.on_event("shutdown")
async def shutdown_event():
    if settings.STORAGE_BACKEND == "sql":
        await get_engine().dispose()


@app.get("/api/healthz", tags=["system"], summary="Liveness probe")
def healthz() -> dict[str, str]:
    """Simple liveness probe that load balancers and monitors can call."""

    return {"status": "ok"}


@app.get("/api/readyz", tags=["system"], summary="Readiness probe")
async def readyz():
    if settings.STORAGE_BACKEND == "memory":
        return {"ready": True}
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"ready": True}
    except Exception:
        raise HTTPException(status_code=503, detail="Database not reachable")


app.include_router(fabrics_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
app.include_router(seamstresses_router, prefix="/api")
app.include_router(products_router, prefix="/api")
