from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import OperationalError, InterfaceError
from app.exceptions.errors import ApplicationException, StoreUnavailableError
from app.core.logger import get_logger

logger = get_logger("exception_handlers")

# Errors controllers let through untouched; anything else becomes a logged 500
EXPECTED_ERRORS = (ApplicationException, StarletteHTTPException, OperationalError, InterfaceError)


async def application_exception_handler(request: Request, exc: ApplicationException):
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return exc.to_response()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    errors = []
    for error in exc.errors():
        errors.append({
            "type": error.get("type"),
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg"),
        })
    return JSONResponse(
        status_code=422,
        content={"error": "Validation failed", "detail": errors}
    )


async def store_exception_handler(request: Request, exc: Exception):
    # Driver messages can carry SQL and connection details; log them, don't return them
    logger.error(f"Store error on {request.method} {request.url.path}: {repr(exc)}")
    return StoreUnavailableError().to_response()


async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {repr(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred"}
    )


def register_exception_handlers(app):
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OperationalError, store_exception_handler)
    app.add_exception_handler(InterfaceError, store_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
