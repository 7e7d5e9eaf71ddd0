import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StoreError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StoreError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(StoreError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(StoreError):
    status_code = 403
    default_message = "Access denied"


class NotFound(StoreError):
    status_code = 404
    default_message = "Not found"


class Conflict(StoreError):
    status_code = 409
    default_message = "Conflict"


def error_body(status_code, message):
    return {"status": status_code, "message": message}


# ------------------------------------------------------------
# Exception handlers
# ------------------------------------------------------------

async def store_error_handler(request: Request, exc: StoreError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=headers,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # unknown routes, wrong methods and other errors raised by the framework itself
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(status_code=400, content=error_body(400, "; ".join(problems)))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body(500, StoreError.default_message))


def register_handlers(app):
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
