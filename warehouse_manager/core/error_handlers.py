# warehouse_manager/core/error_handlers.py
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from warehouse_manager.core.exceptions import InventoryError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in jsonable_encoder(exc.errors()):
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        parts.append(f"{field}: {error.get('msg')}" if field else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


def setup_exception_handlers(app: FastAPI):
    """Render every failure as ``{"error": <message>}``"""

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        logger.info(
            f"{request.method} {request.url.path} rejected: "
            f"{type(exc).__name__}: {exc.message} {exc.details or ''}"
        )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, _describe_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.method} {request.url.path}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Unexpected server error. Please try again."
        )
