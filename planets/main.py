import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from planets.config import settings
from planets.errors import AppError, ErrorType, error_type_of
from planets.routers import auth, runs, spatial
from planets.services.oauth_providers import build_providers
from planets.services.oauth_state import OAuthStateRegistry

logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[ErrorType, int] = {
    ErrorType.not_found: logging.DEBUG,
    ErrorType.validation: logging.DEBUG,
    ErrorType.method_not_allowed: logging.DEBUG,
    ErrorType.conflict: logging.INFO,
    ErrorType.unauthorized: logging.WARNING,
    ErrorType.forbidden: logging.WARNING,
    ErrorType.external: logging.ERROR,
    ErrorType.internal: logging.ERROR,
}

_HTTP_STATUS_TYPES: dict[int, ErrorType] = {
    400: ErrorType.validation,
    401: ErrorType.unauthorized,
    403: ErrorType.forbidden,
    404: ErrorType.not_found,
    409: ErrorType.conflict,
    503: ErrorType.external,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    states = OAuthStateRegistry(
        ttl=timedelta(minutes=settings.oauth_state_ttl_minutes),
        strict_fingerprint=settings.oauth_strict_fingerprint,
    )
    app.state.oauth_states = states
    app.state.oauth_providers = build_providers(settings)
    sweeper = asyncio.create_task(
        states.run_sweeper(timedelta(minutes=settings.oauth_state_sweep_interval_minutes))
    )
    logger.info("Planets server starting (%s)", settings.environment)
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


app = FastAPI(
    title="Planets",
    description="Procedural universe generator for a turn-based strategy game",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(runs.router)
app.include_router(spatial.router)
app.include_router(spatial.systems_router)


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.type.value, "message": exc.message, "code": exc.status_code},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.log(
        _LOG_LEVELS[exc.type],
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.type.value,
        exc,
    )
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return await app_error_handler(request, AppError.validation(details or "invalid request"))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        error = AppError.method_not_allowed(request.method)
    else:
        error_type = _HTTP_STATUS_TYPES.get(exc.status_code, ErrorType.internal)
        error = AppError(error_type, str(exc.detail))
    return await app_error_handler(request, error)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(AppError(error_type_of(exc), "internal server error"))


@app.get("/health")
async def health_check():
    return {"status": "ok"}
