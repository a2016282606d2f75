# app/core/tracing.py - Request trace IDs and structured loguru logging

import os
import socket
import traceback
import sys
import json
import random
from datetime import datetime, timezone
from typing import Optional
from loguru import logger
from contextvars import ContextVar

from app.core.config import settings

SERVICE_NAME = "taskcraft-api"
SERVICE_VERSION = "1.0.0"
TRACE_HEADER = b"x-trace-id"

# Context variables for trace propagation across awaits
_trace_id_context: ContextVar[str] = ContextVar('trace_id', default='no-trace')
_span_id_context: ContextVar[str] = ContextVar('span_id', default='no-span')


def generate_trace_id() -> str:
    """Generate a 128-bit trace ID as 32-character hex string"""
    return f"{random.getrandbits(128):032x}"


def generate_span_id() -> str:
    """Generate a 64-bit span ID as 16-character hex string"""
    return f"{random.getrandbits(64):016x}"


class TracingMiddleware:
    """
    Pure ASGI middleware that opens a trace context for every HTTP request
    and websocket handshake. An incoming X-Trace-ID header is honoured so
    clients can correlate their own logs; the id is echoed back on responses.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        incoming = dict(scope.get("headers") or []).get(TRACE_HEADER)
        trace_id = incoming.decode("latin-1") if incoming else generate_trace_id()
        trace_token = _trace_id_context.set(trace_id)
        span_token = _span_id_context.set(generate_span_id())

        async def send_with_trace(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                if not any(name.lower() == TRACE_HEADER for name, _ in headers):
                    headers.append((TRACE_HEADER, trace_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_trace)
        finally:
            _trace_id_context.reset(trace_token)
            _span_id_context.reset(span_token)


def setup_tracing(app) -> None:
    """Install the tracing middleware and configure log sinks"""
    app.add_middleware(TracingMiddleware)
    setup_structured_logging(enable_json=settings.should_use_json_logging)
    info("Tracing configured", service=SERVICE_NAME, environment=settings.ENVIRONMENT)


def format_stack_trace(exception_info) -> Optional[str]:
    """Format exception stack trace for logging"""
    if not exception_info:
        return None

    if exception_info.traceback:
        return ''.join(traceback.format_exception(
            exception_info.type,
            exception_info.value,
            exception_info.traceback
        ))
    return str(exception_info.value)


def setup_structured_logging(enable_json: Optional[bool] = None):
    """Replace loguru's default sink with a JSON or human-readable one"""
    if enable_json is None:
        enable_json = settings.should_use_json_logging

    logger.remove()

    hostname = socket.gethostname()
    pid = os.getpid()
    environment = settings.ENVIRONMENT

    if enable_json:
        def json_sink(message):
            record = message.record
            extra = record["extra"]
            trace_id = extra.get("trace_id", "no-trace")
            span_id = extra.get("span_id", "no-span")

            log_entry = {
                "@timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record["level"].name,
                "message": record["message"],
                "service": {
                    "name": SERVICE_NAME,
                    "version": SERVICE_VERSION,
                    "environment": environment,
                },
                "host": {"hostname": hostname},
                "process": {"pid": pid},
                "log": {
                    "origin": {
                        "file": record["file"].name,
                        "line": record["line"],
                        "function": record["function"],
                    },
                    "logger": record["name"],
                },
                "trace": {"id": trace_id, "span_id": span_id},
            }

            custom = {k: v for k, v in extra.items() if k not in ("trace_id", "span_id")}
            if custom:
                log_entry["custom"] = custom

            if record["exception"]:
                exc_type = record["exception"].type
                log_entry["error"] = {
                    "type": exc_type.__name__ if exc_type else "UnknownError",
                    "message": str(record["exception"].value),
                    "stack_trace": format_stack_trace(record["exception"]),
                }

            sys.stderr.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")
            sys.stderr.flush()

        logger.add(json_sink, level=settings.LOG_LEVEL, enqueue=True, catch=True)
    else:
        def format_with_trace(record):
            trace_id = record["extra"].get("trace_id", "no-trace")
            trace_info = f" [trace:{trace_id[:8]}]" if trace_id != "no-trace" else ""
            return (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                "<cyan>{name}:{function}:{line}</cyan>" + trace_info + " - <level>{message}</level>\n{exception}"
            )

        logger.add(
            sys.stderr,
            format=format_with_trace,
            level=settings.LOG_LEVEL,
            colorize=True,
            enqueue=True,
            catch=True
        )


def get_current_trace_span_ids() -> tuple[str, str]:
    """Trace and span ids of the current request, or 'no-trace'/'no-span' outside one"""
    return _trace_id_context.get(), _span_id_context.get()


def get_current_trace_id() -> str:
    return _trace_id_context.get()


def log_with_trace(level: str, message: str, **kwargs):
    """Log through loguru with the current trace context bound to the record"""
    trace_id, span_id = get_current_trace_span_ids()
    bound = logger.opt(depth=2).bind(trace_id=trace_id, span_id=span_id, **kwargs)
    getattr(bound, level.lower())(message)


# Convenience functions
def info(message: str, **kwargs):
    log_with_trace("info", message, **kwargs)


def debug(message: str, **kwargs):
    log_with_trace("debug", message, **kwargs)


def warning(message: str, **kwargs):
    log_with_trace("warning", message, **kwargs)


def error(message: str, **kwargs):
    log_with_trace("error", message, **kwargs)


__all__ = [
    'setup_tracing', 'setup_structured_logging', 'get_current_trace_span_ids', 'get_current_trace_id',
    'log_with_trace',
    'info', 'debug', 'warning', 'error'
]
