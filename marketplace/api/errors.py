# marketplace/api/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from marketplace.domain.errors import MarketplaceError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def error_body(kind: str, message: str) -> dict:
    return {"success": False, "kind": kind, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        logger.info(f"{request.method} {request.url.path} -> {exc.kind}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.message))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        # bez stack trace dla klienta
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=error_body("InternalError", "Internal Server Error"))
