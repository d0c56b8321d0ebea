"""Calibre Ingest Backend: FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from calibre_ingest.api.routes_health import router as health_router
from calibre_ingest.api.routes_upload import router as upload_router
from calibre_ingest.core.config import ensure_upload_dir, get_settings
from calibre_ingest.middleware.limits import BodySizeLimitMiddleware

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Upload directory: %s", settings.upload_dir)
    logger.info("Allowed file types: %s", settings.allowed_file_types)
    ensure_upload_dir(settings)
    logger.info("Server running on http://%s:%d", settings.host, settings.port)
    yield


app = FastAPI(title="Calibre Ingest Backend", lifespan=lifespan)

app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Client and storage errors carry only a status code.
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return Response(status_code=exc.status_code, headers=getattr(exc, "headers", None))


app.include_router(health_router)
app.include_router(upload_router)


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
