"""FastAPI application entrypoint."""

import logging
import os
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from menuboard.api.v1 import v1_router
from menuboard.core.config import get_settings
from menuboard.core.database import init_db
from menuboard.core.errors import AppError
from menuboard.core.logging import configure_logging

logger = logging.getLogger(__name__)

# Request locations that are not part of the client-facing field path.
_LOC_ROOTS = {"body", "query", "path", "header", "cookie"}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging(settings.log_level)
    await init_db()
    logger.info("startup.done")
    yield
    logger.info("shutdown.done")


app = FastAPI(
    title="Menuboard",
    version="0.1.0",
    description="Multi-tenant restaurant menu management API",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "request.end method=%s path=%s status=%s elapsed_ms=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


# ── Error handlers ───────────────────────────────────────────

@app.exception_handler(AppError)
async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    logger.info("request.error status=%s message=%s", exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOC_ROOTS:
            loc = loc[1:]
        errors.append({
            "field": ".".join(loc),
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={"detail": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    return {"status": "ok"}


# ── Uploaded files ───────────────────────────────────────────
# Created up front: storage writes here on the first upload, after the mount.
os.makedirs(_settings.upload_dir, exist_ok=True)
app.mount(
    _settings.upload_url_prefix,
    StaticFiles(directory=_settings.upload_dir),
    name="uploads",
)
