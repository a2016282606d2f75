# app/exceptions/handlers.py
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from app.core import tracing


def get_safe_headers(request: Request) -> dict:
    """Extract and mask sensitive headers for logging"""
    headers = request.headers
    return {
        "user_agent": headers.get("user-agent", "unknown"),
        "authorization": (headers.get("authorization", "")[:10] + "...") if headers.get("authorization") else "none",
    }


def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    """Every error leaves the API as {"error": "<message>"}"""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers={**(headers or {}), "X-Trace-ID": tracing.get_current_trace_id()},
    )


def describe_validation_error(error: dict) -> str:
    """Turn the first pydantic error into a single readable sentence"""
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    if error.get("type") == "extra_forbidden":
        return f"Invalid field in update: {field}"
    if error.get("type") == "json_invalid":
        return "Malformed JSON body"
    if error.get("type") == "missing":
        return f"{field} is required"
    if field:
        return f"Invalid {field}: {error.get('msg')}"
    return error.get("msg", "Invalid request")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    log = tracing.error if exc.status_code >= 500 else tracing.warning
    log(
        f"HTTP {exc.status_code}: {exc.detail}",
        url=str(request.url),
        ip=get_remote_address(request),
        **get_safe_headers(request)
    )
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    tracing.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        url=str(request.url),
        ip=get_remote_address(request),
    )
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = describe_validation_error(errors[0]) if errors else "Invalid request"

    tracing.warning(
        f"Validation error: {message}",
        url=str(request.url),
        ip=get_remote_address(request),
        error_count=len(errors),
    )
    return error_response(400, message)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    tracing.warning(
        f"Rate limit exceeded: {exc.detail}",
        url=str(request.url),
        ip=get_remote_address(request),
    )
    return error_response(429, f"Rate limit exceeded: {exc.detail}")


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    tracing.error(
        f"Unhandled exception: {exc}",
        url=str(request.url),
        ip=get_remote_address(request),
        error_type=type(exc).__name__,
        **get_safe_headers(request)
    )
    return error_response(500, "Internal server error")


def register_exception_handlers(app) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, global_exception_handler)
