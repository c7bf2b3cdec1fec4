# Third-party imports
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk

# Local application imports
from civiclink.core.exceptions import CivicLinkError, UnauthorizedError
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.schemas.common import BaseResponse

logger = get_contextual_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    # Map specific HTTP status codes to custom error codes
    error_map = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }

    @app.exception_handler(CivicLinkError)
    async def civiclink_exception_handler(
        request: Request,  # noqa
        exc: CivicLinkError,
    ) -> JSONResponse:
        response = BaseResponse.failure(code=exc.code, message=exc.message, details=exc.details)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,  # noqa
        exc: HTTPException,
    ) -> JSONResponse:
        # Determine the error code based on the status code
        error_code = error_map.get(exc.status_code, "error")
        # Ensure the detail is a string; if not, convert it
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = BaseResponse.failure(code=error_code, message=detail)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        # Collect one message per field so clients can show them next to inputs
        field_errors: dict[str, str] = {}
        for error in exc.errors():
            message = error.get("msg", "")
            # Strip pydantic's "Value error, " prefix
            val_error_prefix = "Value error, "
            if message.startswith(val_error_prefix):
                message = message[len(val_error_prefix) :]

            location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            field = ".".join(location) or "request"
            field_errors.setdefault(field, message)

        # Join the first few messages into the summary
        max_errors = 5
        shown = [f"{field}: {message}" for field, message in list(field_errors.items())[:max_errors]]
        if len(field_errors) > max_errors:
            shown.append("...and more errors")
        detail = "; ".join(shown) if shown else "Invalid request data"

        response = BaseResponse.failure(code="bad_request", message=detail, details=field_errors or None)
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        # Capture the exception in Sentry for monitoring
        sentry_sdk.capture_exception(exc)
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        response = BaseResponse.failure(
            code="internal_server_error",
            message="An unexpected error occurred. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())
