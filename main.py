"""Main FastAPI application for the Image OCR service."""

import asyncio
import time
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from core.config import settings, ensure_directories
from core.exceptions import UploadTooLargeError
from core.keepalive import keep_alive
from core.logging import log
from api import demo, health, ocr

# Ensure directories exist
ensure_directories()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    log.info("Image OCR service starting up...")
    log.info(f"Upload directory: {settings.UPLOAD_DIR}")
    log.info(f"Server running on port {settings.PORT}")
    ping_task = None
    if settings.SELF_PING_INTERVAL_SECONDS > 0:
        ping_task = asyncio.create_task(
            keep_alive(settings.SELF_PING_URL, settings.SELF_PING_INTERVAL_SECONDS)
        )
    yield
    # Shutdown
    if ping_task is not None:
        ping_task.cancel()
        with suppress(asyncio.CancelledError):
            await ping_task
    log.info("Image OCR service shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Image-Optical-Character-Recognition",
    description="Scan image files and retrieve textual data embedded within.",
    version="1.0.0",
    contact={"name": "Orji Michael", "email": "orjimichael4886@gmail.com"},
    servers=[
        {"url": "http://localhost:5000", "description": "Development Environment"},
        {"url": "https://image-optical-character-recognition.onrender.com", "description": "Staging Environment"},
    ],
    openapi_tags=[
        {"name": "Default", "description": "Default API Operations that come inbuilt"},
    ],
    lifespan=lifespan,
    docs_url="/docs",  # Swagger UI documentation
    openapi_url="/openapi.json",  # OpenAPI schema
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Access log line per request: method, path, status, duration."""
    started = time.perf_counter()
    status_code = 500  # kept when the handler raises
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        log.info(f"{request.method} {request.url.path} {status_code} {elapsed_ms:.3f} ms")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods on known paths are both "no such route"
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "API route does not exist"},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    # A non-file value in the upload field means no file was attached
    if request.url.path == "/extract-text" and any(
        tuple(error.get("loc", ())) == ("body", "file") for error in exc.errors()
    ):
        return ocr.failure(ocr.NO_FILE_MESSAGE)
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request"},
    )


@app.exception_handler(UploadTooLargeError)
async def upload_too_large_handler(request: Request, exc: UploadTooLargeError):
    log.warning(f"Rejected upload to {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=413,
        content={"success": False, "message": str(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "status": 500, "message": str(exc)},
    )


# Register routers
app.include_router(ocr.router)
app.include_router(demo.router)
app.include_router(health.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_config=None,  # logging is configured in core.logging
    )
