"""
FastAPI application entry point for the wishlist service.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from wishlist.config import get_settings
from wishlist.local_store import CorruptLocalStateError
from wishlist.routes import router

logger = logging.getLogger(__name__)


async def _remote_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Remote database call failed: %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=502, content={"detail": "Remote database error"})


async def _corrupt_local_state(
    request: Request, exc: CorruptLocalStateError
) -> JSONResponse:
    logger.error("Local store is unreadable (key %s)", exc.key, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Wishlist", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.add_exception_handler(SQLAlchemyError, _remote_error)
    app.add_exception_handler(CorruptLocalStateError, _corrupt_local_state)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("wishlist.app:app", host="0.0.0.0", port=8000)
