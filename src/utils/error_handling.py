"""
Centralized Error Handling and Logging
Structured error logging, request tracing, and the global exception handlers.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from utils.exceptions import StorageError

# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
endpoint_context_var: ContextVar[str] = ContextVar('endpoint_context', default='')

logger = logging.getLogger(__name__)


class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    # Field names whose values are redacted from logs
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'bearer', 'credential', 'cookie'
    ]

    MAX_BODY_LOG_SIZE = 5000

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively redact sensitive fields and truncate large strings"""
        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(str(key)) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True
    ) -> str:
        """Log a JSON error entry and return its trace id"""

        # Reuse the request's trace id so the log line matches the X-Trace-ID header
        trace_id = None
        if request is not None:
            trace_id = getattr(request.state, 'trace_id', None)
        trace_id = trace_id or request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request is not None:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers),
                "client_ip": request.client.host if request.client else None,
            }

        if exception is not None:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        endpoint_context = endpoint_context_var.get('')
        if endpoint_context:
            log_entry["endpoint_context"] = endpoint_context

        logger.error(json.dumps(log_entry, indent=2, default=str))

        return trace_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a trace id to every request and captures its body for error logs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)
        endpoint_context_var.set('')

        body = None
        try:
            body = await request.body()
        except Exception as e:
            StructuredLogger.log_error(
                "middleware_error",
                "Failed to capture request body",
                request=request,
                exception=e,
                include_traceback=False
            )

        request.state.captured_body = body
        request.state.trace_id = trace_id

        try:
            response = await call_next(request)
        except Exception as e:
            # Answered here so the 500 still carries X-Trace-ID
            response = await general_exception_handler(request, e)

        response.headers["X-Trace-ID"] = trace_id
        return response


def _captured_body(request: Request) -> Any:
    """Request body for logging, parsed when it is JSON so fields can be redacted"""
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        text = body.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"

    try:
        payload = json.loads(text)
    except ValueError:
        payload = text
    return ErrorHandlingConfig.sanitize_data(payload)


def _error_response(status_code: int, content: Dict[str, Any], trace_id: Optional[str]) -> JSONResponse:
    if trace_id:
        content["trace_id"] = trace_id
    content["timestamp"] = datetime.utcnow().isoformat()

    return JSONResponse(status_code=status_code, content=content)


# Global Exception Handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions, logging server-side failures"""

    trace_id = None
    if exc.status_code >= 500:
        trace_id = StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc,
            extra_context={"request_body": _captured_body(request)},
            include_traceback=False
        )

    return _error_response(
        exc.status_code,
        {"error": f"HTTP {exc.status_code}", "message": exc.detail},
        trace_id
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed bodies and path parameters with 400"""

    validation_details = []
    for error in exc.errors():
        validation_details.append({
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown"),
        })

    trace_id = StructuredLogger.log_error(
        "validation_error_400",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        extra_context={
            "validation_errors": validation_details,
            "request_body": _captured_body(request)
        },
        include_traceback=False
    )

    return _error_response(
        400,
        {
            "error": "Validation Error",
            "message": "Request validation failed",
            "detail": jsonable_encoder(validation_details),
            "error_count": len(validation_details)
        },
        trace_id
    )


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Turn storage failures into 500 responses instead of dropped requests"""

    trace_id = StructuredLogger.log_error(
        "storage_error",
        f"Storage operation failed: {exc.message}",
        request=request,
        exception=exc,
        extra_context={
            "operation": exc.operation,
            "request_body": _captured_body(request)
        },
        include_traceback=True
    )

    return _error_response(
        500,
        {"error": "Storage Error", "message": "Storage operation failed"},
        trace_id
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions without exposing internal details"""

    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        extra_context={"request_body": _captured_body(request)},
        include_traceback=True
    )

    return _error_response(
        500,
        {"error": "Internal Server Error", "message": "An unexpected error occurred"},
        trace_id
    )


def setup_error_handling(app):
    """Register the tracing middleware and exception handlers on a FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    # Most specific first
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling system initialized")


def set_endpoint_context(context: str):
    """Set context for current endpoint (call at start of endpoint functions)"""
    endpoint_context_var.set(context)
