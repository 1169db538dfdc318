import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from workplace_inspector.api.v1.analyze import router as analyze_router
from workplace_inspector.core.config import get_settings
from workplace_inspector.core.errors import InspectionError, InspectionInputError
from workplace_inspector.core.image_processing import MSG_NO_IMAGE

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected server error occurred"
INVALID_REQUEST_MESSAGE = "Invalid request"

app = FastAPI(
    title="Workplace Inspector API",
    version="0.1.0",
    docs_url="/docs" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.openapi_enabled else None,
)


@app.on_event("startup")
async def _startup_jobs():
    errors = get_settings().validate_required_config()
    if not errors:
        return
    environment = os.getenv("ENVIRONMENT", settings.environment).strip().lower()
    if environment == "production":
        raise RuntimeError(f"Configuration validation failed in production environment: {'; '.join(errors)}")
    for error in errors:
        logger.warning("Configuration problem: %s", error)


if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )

app.include_router(analyze_router, prefix="/api/v1", tags=["analysis"])


@app.get("/health", tags=["health"])
def health():
    current = get_settings()
    return {"status": "ok", "provider": current.ai_vision_provider}


@app.exception_handler(InspectionError)
async def _inspection_error_handler(request: Request, exc: InspectionError):
    if exc.status_code >= 500:
        logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    # A non-file "image" part counts as no image at all.
    fields = {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
    message = MSG_NO_IMAGE if "image" in fields else INVALID_REQUEST_MESSAGE
    return JSONResponse(status_code=400, content=InspectionInputError(message).to_response())


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Hide internal details for 5xx in production unless explicitly enabled.
    if exc.status_code >= 500 and not settings.expose_error_details:
        return JSONResponse(status_code=exc.status_code, content={"error": GENERIC_ERROR_MESSAGE})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    if settings.expose_error_details:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})
