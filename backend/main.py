"""Assistant Studio API.

Builds the FastAPI app: lifespan checks, CORS and rate limiting, request
IDs, envelope-shaped error handlers and the /api router.
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_app_config, get_cors_config, get_settings, setup_logging
from dependencies import get_firestore_service, get_http_client
from llm import list_providers
from middleware import RateLimitMiddleware
from responses import ResponseCode, error_dict
from router import router as api_router

setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

# Plain HTTP errors raised by Starlette or FastAPI, mapped onto envelope codes
HTTP_ERROR_CODES: dict[int, ResponseCode] = {
    401: ResponseCode.UNAUTHORIZED,
    404: ResponseCode.NOT_FOUND,
    405: ResponseCode.VALIDATION_ERROR,
    413: ResponseCode.FILE_TOO_LARGE,
    429: ResponseCode.LLM_RATE_LIMIT,
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Verify Firestore on startup, close the provider HTTP client on shutdown."""
    settings = get_settings()
    logger.info("Starting Assistant Studio (%s)", settings.environment)
    logger.info("Providers: %s", ", ".join(p.id for p in list_providers()))

    health = await get_firestore_service().health_check()
    if health.get("status") != "healthy":
        logger.error("Firestore unhealthy: %s", health)
        raise RuntimeError(f"Firestore health check failed: {health}")
    logger.info("Firestore connected (latency: %sms)", health.get("latency_ms"))

    yield

    logger.info("Shutting down Assistant Studio")
    await get_http_client().aclose()


app = FastAPI(lifespan=lifespan, **get_app_config())
app.add_middleware(CORSMiddleware, **get_cors_config())
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag every request with a short ID, echoed as X-Request-ID."""
    request_id = str(uuid.uuid4())[:8]
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    field_name = errors[0].get("loc", ["unknown"])[-1] if errors else "unknown"

    content = error_dict(
        ResponseCode.VALIDATION_ERROR,
        custom_message=f"Validation failed for field '{field_name}'",
        error_details={
            "validation_errors": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                for e in errors
            ]
        },
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=422, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Dependencies such as auth raise with a ready-made envelope
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    content = error_dict(
        HTTP_ERROR_CODES.get(exc.status_code, ResponseCode.INTERNAL_ERROR),
        custom_message=str(exc.detail),
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)

    content = error_dict(
        ResponseCode.INTERNAL_ERROR,
        custom_message="An unexpected error occurred",
        error_details={"exception_type": type(exc).__name__},
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=500, content=content)


app.include_router(api_router, prefix="/api")


@app.get("/", include_in_schema=False)
async def root():
    """Service info."""
    return {
        "name": "Assistant Studio",
        "description": "Configure AI assistants and chat with them",
        "providers": [p.id for p in list_providers()],
        "docs": "/api/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=get_settings().debug)
