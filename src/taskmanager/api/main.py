import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..logging_setup import setup_logging
from .settings import get_settings
from .routers import ai as ai_router
from .routers import tasks as tasks_router

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "tasks", "description": "CRUD and bulk update operations for tasks."},
    {"name": "ai", "description": "Proxy to the generative-language service."},
]

app = FastAPI(
    title="AI Task Manager API",
    description="Backend API for a personal task manager with an AI generation proxy.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

_settings = get_settings()

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            # ctx may hold the raw exception object, which is not JSON serializable
            "detail": [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()],
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so failures still come back as structured JSON."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Something went wrong!", "error": str(exc)},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the active task store.
    """
    return {"message": "AI Task Manager API is running!", "backend": _settings.persistence_backend}


# Include routers
app.include_router(tasks_router.router)
app.include_router(ai_router.router)


# PUBLIC_INTERFACE
def serve() -> None:
    """Console entry point: configure logging and run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Starting API on http://%s:%d (store=%s)", settings.host, settings.port, settings.persistence_backend)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
