import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from health.interfaces.routes import router as health_router
from shared.config import settings
from shared.exceptions import (
    AppError,
    ConfigError,
    ConnectivityError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from shared.infrastructure.database import DatabaseGateway
from shared.infrastructure.logger import close_logging, get_logger, init_logging
from users.interfaces.routes import router as users_router

log = get_logger("main")

# Browser metadata requests: never logged, or logged below INFO.
SILENT_PATHS = {"/.well-known/appspecific/com.chrome.devtools.json"}
QUIET_PATHS = {"/favicon.ico"}

ENDPOINTS = [
    ("GET", "/health", "Health check"),
    ("POST", "/api/user", "Create a new user"),
    ("GET", "/api/users", "Get all users"),
    ("GET", "/api/user/{id}", "Get user by ID"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_logging(settings)
    log.info("Starting server...")

    gateway = DatabaseGateway(settings)
    try:
        await gateway.connect()
        await gateway.bootstrap()
    except (ConfigError, ConnectivityError, StoreError) as exc:
        log.error("Database startup failed", error=exc.message)
        await gateway.close()
        raise
    app.state.gateway = gateway

    log.info("Server running", url=f"http://{settings.HOST}:{settings.PORT}")
    for method, path, description in ENDPOINTS:
        log.info(f"   {method:<6} {path:<15} - {description}")

    try:
        yield
    finally:
        log.info("Shutting down server...")
        await gateway.close()
        close_logging()


app = FastAPI(
    title="Check-in Registry",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Accept", "Authorization", "Content-Type"],
    max_age=300,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    path = request.url.path
    if path in SILENT_PATHS:
        return await call_next(request)

    start = time.perf_counter()
    response = await call_next(request)
    duration = f"{(time.perf_counter() - start) * 1000:.3f}ms"

    level = "DEBUG" if path in QUIET_PATHS else "INFO"
    log.request(level, request.method, path, response.status_code, duration)
    return response


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    log.error("Invalid request body", path=request.url.path, errors=len(exc.errors()))
    return PlainTextResponse("Invalid request body", status_code=400)


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    log.warn("Missing required fields", fields=",".join(exc.fields))
    return PlainTextResponse(exc.message, status_code=400)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    log.warn(exc.message, path=request.url.path)
    return PlainTextResponse(exc.message, status_code=404)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    log.error("Database error", path=request.url.path, error=exc.message)
    return PlainTextResponse(exc.message, status_code=500)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    log.error("Request failed", path=request.url.path, error=exc.message)
    return PlainTextResponse(exc.message, status_code=500)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


app.include_router(health_router)
app.include_router(users_router)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, access_log=False, log_config=None)


if __name__ == "__main__":
    run()
