"""FastAPI application entry point."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.logging import RequestLog, log_request
from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import (
    health_router,
    preferences_router,
    schedule_requests_router,
    schedules_router,
)
from core.config import API_DEBUG, API_REQUEST_LOGGING, API_VERSION
from core.errors import (
    BatchAbortedError,
    InvalidTemplateError,
    InvalidTimeRangeError,
    InvalidWeekStartError,
    PastWeekError,
    PreferenceValidationError,
    ScheduleConflictError,
    ScheduleNotFoundError,
)
from core.log import get_logger, setup_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    setup_logger()
    logger.info("Salon schedule API %s starting", API_VERSION)

    yield

    logger.info("Salon schedule API shutting down")


app = FastAPI(
    title="Salon Staff Schedule API",
    description="REST API for staff weekly schedules, schedule requests and user preferences",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_json(request: Request, status_code: int, error: str, code: str, details=None) -> JSONResponse:
    """Standard error body; also notes the error on the request for the request log."""
    request.state.error_code = code
    request.state.error_message = error
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, details=details or []).model_dump(),
    )


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def record_request(request: Request, call_next):
    """Write every request's outcome to the api_requests table."""
    start_time = time.time()
    response = await call_next(request)

    if API_REQUEST_LOGGING:
        request_log = RequestLog(
            endpoint=request.url.path,
            method=request.method,
            client_ip=get_client_ip(request),
            status_code=response.status_code,
            error_code=getattr(request.state, "error_code", None),
            error_message=getattr(request.state, "error_message", None),
            processing_time_ms=int((time.time() - start_time) * 1000),
            entries_created=getattr(request.state, "entries_created", None),
            entries_skipped=getattr(request.state, "entries_skipped", None),
        )
        try:
            log_request(request_log)
        except Exception as e:
            # Don't fail the request if logging fails
            logger.warning("Could not record request %s: %s", request_log.request_id, e)

    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Flatten {error, code, details} dicts raised by routes into the standard body."""
    if isinstance(exc.detail, dict):
        return error_json(
            request,
            exc.status_code,
            exc.detail.get("error", ""),
            exc.detail.get("code", ErrorCodes.INVALID_REQUEST),
            exc.detail.get("details", []),
        )
    code = ErrorCodes.UNAUTHORIZED if exc.status_code == 401 else ErrorCodes.INVALID_REQUEST
    return error_json(request, exc.status_code, str(exc.detail), code)


@app.exception_handler(PastWeekError)
async def past_week_handler(request: Request, exc: PastWeekError):
    return error_json(request, 422, str(exc), ErrorCodes.PAST_WEEK)


@app.exception_handler(InvalidTemplateError)
@app.exception_handler(InvalidWeekStartError)
async def invalid_template_handler(request: Request, exc: ValueError):
    return error_json(request, 400, "Invalid weekly template", ErrorCodes.INVALID_REQUEST, [str(exc)])


@app.exception_handler(InvalidTimeRangeError)
async def invalid_time_handler(request: Request, exc: InvalidTimeRangeError):
    return error_json(request, 422, "Invalid schedule time", ErrorCodes.VALIDATION_ERROR, [str(exc)])


@app.exception_handler(ScheduleConflictError)
async def conflict_handler(request: Request, exc: ScheduleConflictError):
    details = [
        f"{c['date']} {c['start_time']} - {c['end_time']} ({c['id']})" for c in exc.conflicts
    ]
    return error_json(request, 409, str(exc), ErrorCodes.SCHEDULE_CONFLICT, details)


@app.exception_handler(ScheduleNotFoundError)
async def not_found_handler(request: Request, exc: ScheduleNotFoundError):
    return error_json(request, 404, str(exc), ErrorCodes.NOT_FOUND)


@app.exception_handler(PreferenceValidationError)
async def preference_validation_handler(request: Request, exc: PreferenceValidationError):
    return error_json(request, 422, str(exc), ErrorCodes.VALIDATION_ERROR, exc.details)


@app.exception_handler(BatchAbortedError)
async def batch_aborted_handler(request: Request, exc: BatchAbortedError):
    """Persistence failed mid-batch; entries created so far are kept."""
    result = exc.result
    request.state.entries_created = result.created_count
    request.state.entries_skipped = result.skipped_count
    return error_json(
        request,
        502,
        "Failed to create schedule",
        ErrorCodes.PERSISTENCE_ERROR,
        [
            f"{result.created_count} created before failure",
            f"{result.skipped_count} skipped due to conflicts",
        ],
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_json(request, 500, "Internal server error", ErrorCodes.INTERNAL_ERROR)


# Include routers
app.include_router(health_router)
app.include_router(schedules_router)
app.include_router(schedule_requests_router)
app.include_router(preferences_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
