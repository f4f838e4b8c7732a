from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tailorshop.core import get_logger
from tailorshop.application.errors import TailorShopError

logger = get_logger(__name__)

VALUE_ERROR_PREFIX = "Value error, "


def _field_name(loc) -> str:
    # Drop the "body"/"query" prefix; keep the path of the offending field
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for error in exc.errors():
        message = error.get("msg", "Invalid value")
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]
        details.append({"field": _field_name(error.get("loc", ())), "message": message})
    return details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TailorShopError)
    async def handle_tailorshop_error(request: Request, exc: TailorShopError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = validation_details(exc)
        logger.info(
            f"{request.method} {request.url.path} validation failed",
            extra={"extra_fields": {"details": details}},
        )
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
