"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.routers import streaks
from app.utils.errors import AppError, InvalidInputError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.app_name,
    description="Saturday attendance streaks and milestone rewards",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    """Return streak errors with their code; storage failures are also logged."""
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message, exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    _: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Normalize FastAPI validation responses."""
    detail = exc.errors()
    message = detail[0].get("msg", "Invalid request") if detail else "Invalid request"
    api_error = InvalidInputError(message)
    return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Catch unexpected errors without leaking internals."""
    logger.exception("Unhandled exception", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


app.include_router(
    streaks.router,
    prefix="/seasons/{season_id}/members/{member_id}/streak",
    tags=["streaks"],
)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint for deploys and uptime checks."""
    return {"status": "ok", "version": settings.app_version}
